# setup.py
from setuptools import setup, find_namespace_packages

setup(
    name="fifolog",
    version="1.0.0",
    description="Queued, non-blocking log writer with backpressure, retry and size-based rotation",
    author="Enrique Paredes",
    author_email="eparedesbalen@gmail.com",
    package_dir={"": "src"},
    packages=find_namespace_packages(where="src", include=["fifolog", "fifolog.*"]),
    python_requires=">=3.9",
    install_requires=[],
    extras_require={
        "test": ["pytest"],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
        "Topic :: System :: Logging",
    ],
)
