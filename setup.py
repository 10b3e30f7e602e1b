from setuptools import setup

from app.__version__ import __version_string__

setup(
    name="chip8py",
    version=__version_string__,
    description="CHIP-8 virtual machine with a pygame frontend",
    packages=["chip8py", "chip8py.tests"],
    include_package_data=True,
    package_dir={"chip8py": "app/chip8py"},
    python_requires=">=3.11",
    install_requires=[
        "numpy",
        "bitarray",
        "rich",
        "returns",
        "pygame",
    ],
    extras_require={
        "test": ["pytest"],
    },
    zip_safe=False,
)
