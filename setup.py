"""
Setup file.
"""

from setuptools import find_packages, setup

KEYWORDS = "build system incremental compiler linker c c++ toolchain compile_commands"


if __name__ == "__main__":
    setup(
        name="buldr",
        version="0.1.0",
        description="Dependency-ordered incremental build tool for multi-project C/C++ repositories",
        maintainer="Hector Peeters",
        keywords=KEYWORDS,
        python_requires=">=3.11",
        package_dir={"": "src"},
        packages=find_packages(where="src"),
        install_requires=["tqdm"],
        extras_require={"test": ["pytest"]},
        entry_points={"console_scripts": ["buldr = buldr.cli:main"]},
        package_data={"buldr": ["assets/template.toml"]},
        include_package_data=True)
