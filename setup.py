"""
Setup script for iplusone.

iplusone is a sentence-based spaced repetition engine for languages written
without spaces between words. It serves two roles:

1. Scheduler - SM-2 review intervals for every word the learner meets
2. Selector - picks the next "i+1" sentence: overdue words first, then the
   sentence with the least new vocabulary

The 'iplusone' command is a thin terminal shell around the engine.
"""

from setuptools import find_packages, setup

setup(
    name="iplusone",
    version="0.1.0",
    description="Sentence-based spaced repetition with i+1 sentence selection",
    long_description=open("README.md", encoding="utf-8").read() if __import__("os").path.exists("README.md") else "",
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*"]),
    package_data={"iplusone.data": ["*.txt"]},
    python_requires=">=3.10",
    install_requires=[
        # CLI
        "typer>=0.9.0",
        "rich>=13.0.0",
        # Database
        "sqlalchemy>=2.0.0",
        "psycopg2-binary>=2.9.0",
        # Config & Validation
        "pydantic>=2.0.0",
        "pydantic-settings>=2.0.0",
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
        "fugashi": [
            "fugashi>=1.3.0",
            "unidic-lite>=1.0.8",
        ],
    },
    entry_points={
        "console_scripts": [
            "iplusone=iplusone.cli:main",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Console",
        "Intended Audience :: Education",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Education",
        "Topic :: Education :: Computer Aided Instruction (CAI)",
        "Natural Language :: Japanese",
    ],
    keywords="learning spaced-repetition sm2 japanese i+1 sentence-mining",
)
