"""
Setup script for MySQL MCP Server
Install with: pip install -e .
"""

from setuptools import setup, find_packages
from pathlib import Path

# Read README for long description
readme_file = Path(__file__).parent / "README.md"
long_description = readme_file.read_text(encoding="utf-8") if readme_file.exists() else ""

# Read requirements
requirements_file = Path(__file__).parent / "requirements.txt"
requirements = []
if requirements_file.exists():
    with open(requirements_file, 'r', encoding='utf-8') as f:
        requirements = [
            line.strip()
            for line in f
            if line.strip() and not line.startswith('#')
        ]

setup(
    name="mysql-mcp-server",
    version="1.0.0",
    description="MCP Server exposing MySQL schema discovery, row CRUD and SQL execution",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*", "docs"]),
    py_modules=[
        "server",
        "config",
        "database",
        "gateway",
        "models",
        "container",
    ],
    python_requires=">=3.10",
    install_requires=requirements,
    extras_require={
        "tests": [
            "pytest>=7.4",
            "pytest-asyncio>=0.23",
            "httpx>=0.27",
            "PyMySQL>=1.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "mysql-mcp-server=server:cli_entry",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Topic :: Database",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
    keywords="mcp server mysql database",
)
