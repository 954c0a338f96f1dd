"""Setup configuration for Cocktail Porter."""

from setuptools import setup, find_namespace_packages

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

with open("requirements.txt", "r", encoding="utf-8") as fh:
    requirements = [line.strip() for line in fh if line.strip() and not line.startswith("#")]

setup(
    name="cocktail-porter",
    version="1.4.0",
    description="Import and export of cocktail recipes between workspaces",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_namespace_packages(
        include=["src", "src.*"], exclude=["src.tests", "src.tests.*"]
    ),
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Operating System :: OS Independent",
    ],
    python_requires=">=3.10",
    install_requires=requirements,
    extras_require={
        "test": ["pytest>=7.0"],
    },
    entry_points={
        "console_scripts": [
            "cocktail-porter=src.utils.bundle_cli:main",
        ],
    },
)
