# setup.py
from setuptools import setup, find_packages

setup(
    name="sitemap-crawler",
    version="0.1.0",
    description="Concurrent sitemap crawler: resolves sitemap trees and fetches every listed page",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "aiohttp>=3.9",
        "click>=8.1",
        "lxml>=4.9",
        "pydantic>=2.5",
        "PyYAML>=6.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.4",
            "pytest-asyncio>=0.23",
        ],
    },
    entry_points={
        "console_scripts": [
            "sitemap-crawler=sitemap_crawler.cli:cli",
        ],
    },
    python_requires=">=3.11",
)
