#!/usr/bin/env python3
"""
Setup script for ballot-box anomaly analysis.

Install with:
    pip install -e .

Or with development tools:
    pip install -e ".[dev]"
"""

from setuptools import setup
from pathlib import Path

# Read version
version_file = Path(__file__).parent / "version.py"
version_dict = {}
exec(version_file.read_text(), version_dict)
__version__ = version_dict.get("__version__", "1.0.0")

# Read README
readme_file = Path(__file__).parent / "README.md"
long_description = readme_file.read_text() if readme_file.exists() else ""

setup(
    name="ballot-anomaly-audit",
    version=__version__,
    author="Ballot Anomaly Audit Contributors",
    author_email="",
    description="Flag suspicious ballot boxes in published per-ballot-box election results",
    long_description=long_description,
    long_description_content_type="text/markdown",
    license="MIT",
    py_modules=[
        "ballot_aggregation",
        "ballot_analysis",
        "ballot_io",
        "ballot_pdf",
        "ballot_reporting",
        "ballot_types",
        "ballot_validation",
        "cli",
        "config",
        "logging_config",
        "party_registry",
        "settlement_outliers",
        "switch_detection",
        "version",
        "vote_normalization",
        "web_ui",
    ],
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Science/Research",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Programming Language :: Python :: 3.13",
        "Topic :: Sociology",
    ],
    python_requires=">=3.11",
    install_requires=[
        "requests>=2.28.0",
        "tenacity>=8.0.0",
        "gradio>=4.0.0",
        "reportlab>=4.0.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-cov>=4.0.0",
            "ruff>=0.1.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "ballot-audit=cli:main",
        ],
    },
    include_package_data=True,
    zip_safe=False,
    keywords="election ballot audit anomaly detection",
)
