# setup.py
from setuptools import setup, find_namespace_packages

setup(
    name="deadregions",
    version="0.1.0",
    description="Find and remove preprocessor conditional regions that are dead in every build configuration",
    author="Enrique Paredes",
    author_email="eparedesbalen@gmail.com",
    package_dir={"": "src"},
    packages=find_namespace_packages(where="src", include=["deadregions*"]),
    python_requires=">=3.8",
    install_requires=[],
    extras_require={
        "test": [
            "pytest",
        ],
    },
    entry_points={
        'console_scripts': [
            'deadregions=deadregions.interface.cli.app:main',
        ],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
    ],
)
