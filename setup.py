from setuptools import setup, find_packages

setup(
    name="seasonfit",
    version="0.1.0",
    packages=find_packages(include=["seasonfit", "seasonfit.*"]),
    install_requires=[
        "numpy>=1.20.0",
        "scipy>=1.7.0",
        "pandas>=1.3.0",
        "matplotlib>=3.4.0",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    python_requires=">=3.8",
)
