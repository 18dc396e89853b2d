"""Setup configuration for gql-e2e."""

from setuptools import setup, find_packages

setup(
    name="gql-e2e",
    version="0.1.0",
    description="Declarative end-to-end scenario runner for GraphQL APIs",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.10",
    install_requires=[
        "requests>=2.31.0",
        "pyyaml>=6.0",
        "click>=8.2.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.4",
            "pytest-asyncio>=0.21",
        ],
    },
    entry_points={
        "console_scripts": [
            "gql-e2e=gql_e2e.cli:main",
        ],
    },
)
