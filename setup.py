from setuptools import setup, find_packages

setup(
    name="learnhub",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    py_modules=["config", "learning_hub", "quiz_system", "main", "streamlit_app"],
    install_requires=[
        "langchain-core>=0.3.0",
        "langchain-openai>=0.2.0",
        "openai>=1.0.0",
        "pydantic>=2.0.0",
        "python-dotenv>=1.0.0",
        "streamlit>=1.36.0",
        "pandas>=2.0.0"
    ],
    extras_require={
        "test": ["pytest>=7.0.0"]
    },
    entry_points={
        "console_scripts": ["learnhub=main:main"]
    },
    python_requires=">=3.9",
)
