#!/usr/bin/env python3

from setuptools import setup, find_packages
import os

# Read the README file for long description
def read_readme():
    """Read README.md for long description."""
    readme_path = os.path.join(os.path.dirname(__file__), 'README.md')
    try:
        with open(readme_path, 'r', encoding='utf-8') as f:
            return f.read()
    except FileNotFoundError:
        return "Claude Usage - token usage analytics and live monitor for Claude plans"

__version__ = "0.1.0"

setup(
    name="claude-usage",
    version=__version__,
    description="Token usage analytics and a live terminal monitor for Claude plans",
    long_description=read_readme(),
    long_description_content_type="text/markdown",
    package_dir={"": "src"},
    packages=find_packages("src", exclude=["tests", "tests.*"]),
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Console",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: System :: Monitoring",
        "Topic :: Terminals",
        "Topic :: Utilities",
    ],
    keywords=[
        "claude", "ai", "token", "usage", "monitor", "terminal", "burn-rate",
        "claude-code", "anthropic", "cli"
    ],
    python_requires=">=3.9",
    install_requires=[
        "rich>=13.0",
        "pytz>=2021.1",
        "pydantic>=2.0",
        "pydantic-settings>=2.10",
        "sentry-sdk>=2.0",
    ],
    extras_require={
        "test": [
            "pytest>=6.0",
            "pytest-cov>=2.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "claude-usage=claude_usage.cli.main:main",
            "cusage=claude_usage.cli.main:main",
        ],
    },
    include_package_data=True,
    zip_safe=False,
    license="MIT",
    platforms=["any"],
)
