from setuptools import setup, find_packages
from setuptools import Command
import subprocess
from typing import List


class FormatCode(Command):
    description = "Formats the code using Black"
    user_options: List[str] = []

    def initialize_options(self):
        pass

    def finalize_options(self):
        pass

    def run(self):
        subprocess.run(["black", ".", "--line-length", "100"])


class TypeCheck(Command):
    description = "Run mypy type checking"
    user_options: List[str] = []

    def initialize_options(self):
        pass

    def finalize_options(self):
        pass

    def run(self):
        subprocess.run(["mypy", "lppl", "common"])


class RunTests(Command):
    description = "Run the pytest suite"
    user_options: List[str] = []

    def initialize_options(self):
        pass

    def finalize_options(self):
        pass

    def run(self):
        subprocess.run(["pytest", "lppl/tests"], check=True)


with open("README.md", "r") as fh:
    long_description = fh.read()


setup(
    name="lppl-fit",
    version="0.1",
    description="Fits the Log-Periodic Power Law model to a price history.",
    packages=find_packages(include=["lppl", "lppl.*", "common", "common.*"]),
    package_data={"lppl": ["conf/*.json"]},
    long_description=long_description,
    long_description_content_type="text/markdown",
    python_requires=">=3.10",
    install_requires=[
        "numpy",
        "pandas",
        "matplotlib",
        "scipy",
        "tqdm",
        "typeguard",
        "black",
        "mypy",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": ["lppl-fit=lppl.demo.demo_fit_csv:main"],
    },
    zip_safe=False,
    cmdclass={
        "format": FormatCode,
        "typecheck": TypeCheck,
        "test": RunTests,
    },
)
