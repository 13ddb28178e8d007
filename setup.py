#!/usr/bin/env python
import setuptools
from setuptools import setup

with open("README.md", "r") as fh:
    long_description = fh.read()

with open("./strdust/VERSION", "r") as vf:
    version = vf.read().strip()

setup(
    name="strdust",
    version=version,

    python_requires=">=3.10",
    install_requires=[
        "mappy>=2.24",
        "numpy>=1.23.4",
        "orjson>=3.9.15,<4",
        "parasail>=1.2.4,<1.4",
        "pysam>=0.19",
        "scikit-learn>=1.2.1",
    ],
    extras_require={
        "test": ["pytest"],
    },

    description="A genotyper for short tandem repeats from long reads.",
    long_description=long_description,
    long_description_content_type="text/markdown",

    classifiers=[
        "Programming Language :: Python :: 3 :: Only",
        "Operating System :: POSIX",
    ],

    packages=setuptools.find_namespace_packages(include=["strdust", "strdust.*"]),
    package_data={"strdust": ["VERSION"]},
    include_package_data=True,

    entry_points={
        "console_scripts": ["strdust=strdust.entry:main"],
    },
)
