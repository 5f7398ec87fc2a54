from __future__ import annotations

from setuptools import find_namespace_packages, setup

PACKAGES = find_namespace_packages(
    include=[
        "cloth_solver",
        "core",
        "geometry",
        "modules",
        "modules.*",
        "parameters",
        "runtime",
        "runtime.*",
        "visualization",
    ]
)


setup(
    name="cloth-solver",
    version="0.1.0",
    description="Baraff-Witkin style cloth force assembly and time integration",
    python_requires=">=3.10",
    packages=PACKAGES,
    py_modules=["main"],
    install_requires=[
        "numpy",
        "scipy",
        "PyYAML",
        "matplotlib",
    ],
    extras_require={"test": ["pytest"]},
    entry_points={"console_scripts": ["cloth-solver=main:main"]},
)
