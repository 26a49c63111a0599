from __future__ import annotations

from setuptools import find_namespace_packages, setup


setup(
    name="nettriage",
    version="0.1.0",
    description="Operator-driven network incident triage: evidence, verdict and gated remediation",
    python_requires=">=3.10",
    packages=find_namespace_packages(include=["nettriage", "nettriage.*"], exclude=["nettriage.tests*"]),
    install_requires=[
        "PyYAML>=6.0",
        "reportlab>=4.0",
    ],
    extras_require={
        "test": ["pytest>=7"],
    },
    entry_points={
        "console_scripts": [
            "nettriage=nettriage.cli.nettriage:main",
        ],
    },
)
