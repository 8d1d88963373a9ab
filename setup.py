from pathlib import Path

from setuptools import find_packages, setup

setup(
    name="gravtensor",
    version="0.1.0",
    description="Generator and solver for isotropic tensor coefficients of spatial field equations.",
    long_description=Path("README.md").read_text(encoding="utf-8"),
    long_description_content_type="text/markdown",
    keywords="tensor symbolic isotropic coefficient gravity",
    license="MIT",
    package_dir={"": "src"},
    packages=find_packages("src"),
    install_requires=Path("requirements.txt").read_text(encoding="utf-8").splitlines(),
    extras_require={"test": ["pytest", "hypothesis[cli]", "coverage"]},
    python_requires=">=3.10",
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Science/Research",
        "Topic :: Scientific/Engineering :: Physics",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3 :: Only",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
    ],
    zip_safe=False,
    entry_points={"console_scripts": ["gravtensor=gravtensor.cli:app"]},
)
