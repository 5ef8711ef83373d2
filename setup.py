from setuptools import setup, find_packages

setup(
    name="devnet-sdk",
    version="0.1.0",
    description="Spawn and manage Starknet Devnet instances from Python",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.11",
    entry_points={
        "console_scripts": [
            "devnet-cli=devnet_sdk.cli:cli_entrypoint",
        ],
    },
    install_requires=[
        "aiohttp>=3.9",
        "asgiref>=3.4",
        "click>=8.1",
        "pydantic>=2",
        "starknet-py>=0.24",
    ],
    extras_require={
        "test": [
            "pytest<9.1",
            "pytest-asyncio>=0.23",
            "aioresponses",
            "aiohttp<3.14",
            "python-dotenv",
            "yarl",
        ],
    },
)
