from setuptools import setup, find_packages

setup(
    name="agent-commit",
    version="1.0.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "g4f",
        "rich",
        "pathspec",
    ],
    extras_require={
        "test": [
            "pytest",
            "pytest-asyncio",
            "GitPython",
        ],
    },
    entry_points={
        'console_scripts': [
            'agent-commit=agent_commit.cli:main_cli',
        ],
    },
    author="Alaamer",
    author_email="",
    description="Automatic Git commits for edits made by coding agents",
    long_description=open("README.md").read(),
    long_description_content_type="text/markdown",
    url="",
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Console",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Software Development :: Version Control :: Git",
    ],
    python_requires=">=3.10",
)
