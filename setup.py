"""
staffdocs setup.py — Package configuration and CLI entry point.
"""

from setuptools import find_packages, setup

setup(
    name="staffdocs",
    version="1.0.0",
    description="staffdocs — Staff document visibility & upload routing resolver",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.11",
    entry_points={
        "console_scripts": [
            "staffdocs=staffdocs.cli:main",
        ],
    },
    install_requires=[
        "sqlalchemy>=2.0",
        "pydantic>=2.5",
        "networkx>=3.2",
        "pyyaml>=6.0",
    ],
    extras_require={
        "postgres": ["psycopg2-binary>=2.9"],
        "test": ["pytest>=7.4"],
    },
)
