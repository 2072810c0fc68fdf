"""Setup configuration for rostersync."""

from setuptools import find_packages, setup

setup(
    name="rostersync",
    version="0.1.0",
    description="Off-line committee roster synchronisation across independent replicas",
    author="rostersync developers",
    packages=find_packages(include=["rostersync", "rostersync.*"]),
    python_requires=">=3.9",
    install_requires=[
        "web3>=7.0.0",
        "eth-account>=0.13.0",
        "eth-abi>=5.0.0",
        "hexbytes>=0.3.0",
        "pydantic>=2.0.0",
        "pydantic-settings>=2.0.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0.0",
            "pytest-mock>=3.10.0",
        ],
        "dev": [
            "pytest>=7.0.0",
            "pytest-mock>=3.10.0",
            "pytest-cov>=4.0.0",
            "ruff>=0.1.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "rostersync=rostersync.cli:main",
        ],
    },
)
