from setuptools import setup, find_packages

setup(
    name="doc_assistant",
    version="0.1.0",
    packages=find_packages(include=["doc_assistant", "doc_assistant.*"]),
    install_requires=[
        "pyyaml",  # For config file parsing
        "python-dotenv",  # For .env loading
        "google-genai",  # For Gemini completions
        "tenacity",  # For the retry loop
        "httpx",  # For transport error classification
        "PyMuPDF",  # For PDF page extraction
        "python-docx>=1.1",  # For DOCX extraction
    ],
    extras_require={
        "test": [
            "pytest",
            "pytest-mock",
        ],
    },
    entry_points={
        "console_scripts": [
            "doc-assistant=doc_assistant.__main__:main",
        ],
    },
    python_requires=">=3.10",
)
