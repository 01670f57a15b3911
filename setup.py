# setup.py
from setuptools import setup, find_namespace_packages

setup(
    name="geestager",
    version="0.1.0",
    description="Stage Earth Engine script repositories: dependency closure, clean module tree and module map",
    packages=find_namespace_packages(where="src", include=["geestager", "geestager.*"]),
    package_dir={"": "src"},
    python_requires=">=3.9",
    install_requires=[],
    extras_require={
        "test": [
            "pytest",
        ],
    },
    entry_points={
        'console_scripts': [
            'geestager=geestager.main:main',
        ],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
    ],
)
