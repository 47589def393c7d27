from setuptools import setup, find_packages

setup(
    name="docguard",
    version="0.1.0",
    description="Documentation-only LLM edits behind a fence-validating, backup-first apply step.",
    author="BAMN",
    packages=find_packages(include=["docguard", "docguard.*"]),
    package_data={"docguard": ["templates/*.j2"]},
    install_requires=[
        "langgraph",
        "langchain-ollama",
        "langchain-core",
        "openai",
        "pydantic>=2",
        "pydantic-settings",
        "jinja2",
        "rich"
    ],
    extras_require={
        "anthropic": ["anthropic"],
        "gemini": ["google-generativeai"],
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": [
            "docguard=docguard.main:main",
            "docguard-sanitize=docguard.core.sanitizer:main",
        ]
    },
    python_requires=">=3.10",
)
