"""Setup script for grocery-price-comparer package."""

from setuptools import setup, find_packages
from pathlib import Path

# Read README
readme_file = Path(__file__).parent / "README.md"
long_description = readme_file.read_text() if readme_file.exists() else ""

setup(
    name="grocery-price-comparer",
    version="1.0.0",
    description="Sweden/Denmark grocery price comparison with access-request onboarding",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    package_data={"price_comparer.database": ["schema.sql"]},
    python_requires=">=3.11",
    install_requires=[
        "asyncpg>=0.29.0",
        "pydantic[email]>=2.5.0",
        "python-dotenv>=1.0.0",
        "click>=8.1.0",
        "aiofiles>=23.2.0",
        "httpx>=0.25.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.4.0",
            "pytest-asyncio>=0.21.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "grocery-prices=price_comparer.cli.commands:main",
        ],
    },
)
