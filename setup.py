"""
Setup script for fluentpath-engine.

FluentPath Engine is the adaptive assessment and review-scheduling core
of an English-learning tool. It serves three roles:

1. Assessment - CEFR level per skill module and upgrade decisions
2. Review Scheduling - Spaced repetition for the vocabulary book
3. Scoring - Heuristic pronunciation and writing scores

The 'fluentpath' command is the CLI entry point; the same engine is
served over REST by 'fluentpath serve' or 'python main.py'.
"""

from setuptools import find_namespace_packages, setup

setup(
    name="fluentpath-engine",
    version="0.1.0",
    description="Adaptive CEFR assessment and vocabulary review scheduling for English learners",
    long_description=open("README.md", encoding="utf-8").read() if __import__("os").path.exists("README.md") else "",
    long_description_content_type="text/markdown",
    author="FluentPath",
    packages=find_namespace_packages(include=["src", "src.*"]),
    py_modules=["config", "main"],
    python_requires=">=3.11",
    install_requires=[
        # CLI
        "typer>=0.12.0",
        "rich>=13.0.0",
        # Config & Validation
        "pydantic>=2.0.0",
        "pydantic-settings>=2.0.0",
        # API
        "fastapi>=0.110.0",
        "uvicorn>=0.27.0",
        # HTTP
        "httpx>=0.25.0",
        # Logging
        "loguru>=0.7.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-cov>=4.0.0",
            "ruff>=0.1.0",
            "mypy>=1.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "fluentpath=src.cli.main:main",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Console",
        "Intended Audience :: Developers",
        "Intended Audience :: Education",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Education",
        "Topic :: Education :: Computer Aided Instruction (CAI)",
    ],
    keywords="learning spaced-repetition cefr assessment english education",
)
