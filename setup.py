#!/usr/bin/env python

from setuptools import find_packages, setup

with open("README.md", "r") as fh:  # description to be used in pypi project page
    long_description = fh.read()

install_requires = ["pyfuse3>=3.3", "pyyaml"]

setup(
    name="icfs",
    version="1.0",
    description="In-memory filesystem mounted with FUSE",
    packages=find_packages(include=["icfs", "icfs.*"]),
    long_description=long_description,
    long_description_content_type="text/markdown",
    python_requires=">=3.10",
    install_requires=install_requires,
    extras_require={"test": ["pytest", "pytest-asyncio"]},
    scripts=["cli.py"],
)
