"""
setup.py

Packaging metadata and CLI entry point for the semantic mediator.

Version: 0.3.0 — Adds the adaptive validation context generator with an
externalized keyword table, cache analytics and the REST API surface.
"""
from setuptools import setup, find_packages

setup(
    name="semantic-mediator",
    version="0.3.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    package_data={
        "mediator": [
            "data/*.yaml",
            "prompts/templates/*.yaml",
        ],
    },
    install_requires=[
        "click",
        "pydantic>=2.0",
        "PyYAML",
        "Jinja2",
        "python-dotenv",
        "requests",
        "openai",
        "tiktoken",
        "anthropic",
        "fastapi",
        "uvicorn",
    ],
    extras_require={
        "test": [
            "pytest",
            "hypothesis",
            "httpx",
        ],
    },
    entry_points={
        "console_scripts": [
            "semantic-mediator=cli:cli",
        ],
    },
    python_requires=">=3.9",
)
