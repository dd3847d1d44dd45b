from setuptools import setup, find_packages

setup(
    name="bookshelf-place",
    version="0.1.0",
    description="Bookshelf placement benchmark reader and row-based block placer",
    author="",
    author_email="",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    python_requires=">=3.9",
    install_requires=[
        "numpy>=1.24.0",
        "networkx>=3.0",
        "pyyaml>=6.0",
        "matplotlib>=3.7.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.4.0",
        ],
        "dev": [
            "black>=23.0.0",
            "mypy>=1.5.0",
            "pytest-cov>=4.1.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "bookshelf-place=bookshelf_place.cli:main",
        ],
    },
)
