from setuptools import find_packages, setup

setup(
    name="vestaboard-mcp",
    version="1.0.0",
    description="To format and display messages on a Vestaboard split-flap display over MCP",
    package_dir={"": "server"},
    packages=find_packages(where="server", include=["vestaboard_mcp", "vestaboard_mcp.*"]),
    python_requires=">=3.11",
    install_requires=[
        "fastapi>=0.110",
        "numpy>=1.26",
        "pydantic>=2.5",
        "uvicorn>=0.29",
    ],
    extras_require={
        "test": [
            "httpx>=0.27",
            "pytest>=8.0",
            "pytest-asyncio>=0.23",
        ],
    },
    entry_points={
        "console_scripts": ["vestaboard-mcp=vestaboard_mcp.main:main"],
    },
)
