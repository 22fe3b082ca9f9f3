"""
Setup script for teachme.

TeachMe is a learn-by-teaching tutor. You explain a concept to a
simulated student backed by Gemini, then the student takes a quiz
graded against the answer key:

1. Teaching - Conversational explanation with the student
2. Quiz - The student answers using only what it was taught
3. Feedback - Misconception analysis when the answer is wrong

The 'teachme' command is the entry point.
"""

from setuptools import find_packages, setup

setup(
    name="teachme",
    version="1.0.0",
    description="Learn by teaching a simulated AI student",
    long_description=open("README.md", encoding="utf-8").read() if __import__("os").path.exists("README.md") else "",
    long_description_content_type="text/markdown",
    author="TeachMe",
    packages=find_packages(include=["teachme", "teachme.*"]),
    py_modules=["config"],
    package_data={"teachme": ["data/*.json"]},
    python_requires=">=3.10",
    install_requires=[
        # CLI
        "typer>=0.9.0",
        "rich>=13.0.0",
        # Config & Validation
        "pydantic>=2.0.0",
        "pydantic-settings>=2.0.0",
        # AI
        "google-generativeai>=0.8.0",
        # Logging
        "loguru>=0.7.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-asyncio>=0.21.0",
            "pytest-cov>=4.0.0",
            "ruff>=0.1.0",
            "mypy>=1.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "teachme=teachme.cli.app:main",
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
    ],
    keywords="learning teaching tutor quiz education gemini",
)
