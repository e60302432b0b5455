"""
Setup configuration for contentengine package.
"""

from setuptools import setup, find_packages

setup(
    name="contentengine",
    version="0.1.0",
    description="Brand content generation pipeline: job queue, templates, validation gates and compositing",
    packages=find_packages(include=["contentengine", "contentengine.*"]),
    package_data={
        "contentengine.templates": ["*.yaml"],
        "contentengine.brands": ["data/*/*.json"],
    },
    include_package_data=True,
    python_requires=">=3.10",
    install_requires=[
        "supabase>=2.0",
        "python-dotenv>=1.0",
        "pyyaml>=6.0",
        "pydantic>=2.5",
        "pydantic-graph>=0.4,<2",
        "httpx>=0.25",
        "tenacity>=8.2",
        "logfire>=2.0",
        "click>=8.1",
    ],
    extras_require={
        "test": [
            "pytest>=7.4",
            "pytest-asyncio>=0.23",
        ],
    },
    entry_points={
        "console_scripts": [
            "contentengine=contentengine.cli.main:cli",
        ],
    },
)
