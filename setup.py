#!/usr/bin/env python3
from setuptools import setup, find_packages

setup(
    name="browser-mcp-harness",
    version="0.1.0",
    description="Stdio test harness for Browser MCP servers",
    packages=find_packages("src"),
    package_dir={"": "src"},
    include_package_data=True,
    install_requires=[
        "aiohttp>=3.8.4",
        "pydantic>=2.0"
    ],
    extras_require={
        "test": [
            "pytest>=7.0"
        ]
    },
    entry_points={
        "console_scripts": [
            "mcp-harness=mcp_harness.__main__:main"
        ]
    },
    python_requires=">=3.8",
)
