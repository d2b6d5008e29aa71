#!/usr/bin/env python3
"""
Setup script for sam-smith package.
"""

from setuptools import setup, find_packages

setup(
    name="sam-smith",
    version="1.0.0",
    author="DevOps Team",
    author_email="devops@example.com",
    description="Scaffold and evolve TypeScript AWS SAM projects",
    long_description=open("README.md").read(),
    long_description_content_type="text/markdown",
    url="https://github.com/your-org/sam-smith",
    packages=find_packages(exclude=["tests", "tests.*"]),
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Topic :: Software Development :: Code Generators",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Operating System :: OS Independent",
    ],
    python_requires=">=3.8",
    install_requires=[
        "python-dotenv>=1.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
            "pytest-mock>=3.10",
        ],
    },
    entry_points={
        "console_scripts": [
            "sam-smith=sam_smith.cli:main",
        ],
    },
    include_package_data=True,
    zip_safe=False,
)
