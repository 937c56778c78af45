from setuptools import setup, find_packages

# Read version from __version__.py without importing the package
version_file = {}
with open("vadscope/__version__.py") as fp:
    exec(fp.read(), version_file)
__version__ = version_file['__version__']

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

python_requires = ">=3.9"

install_requires = [
    # Core Dependencies
    "numpy>=2.0",
    "scipy>=1.10.1",
    "soundfile",

    # Frame prober (Silero VAD ONNX graph + runtime)
    "onnxruntime>=1.16.0",
    "silero-vad>=6.0",

    # Configuration system
    "pydantic>=2.0,<3.0",
    "PyYAML>=6.0",
]

extras_require = {
    "test": [
        "pytest>=7.0",
    ],
}

classifiers = [
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3.9",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Operating System :: OS Independent",
    "Topic :: Multimedia :: Sound/Audio :: Speech",
]

setup(
    name="vadscope",
    version=__version__,
    description="Speech segment detection from per-window speech probabilities",
    long_description=long_description,
    long_description_content_type="text/markdown",
    license="MIT",
    packages=find_packages(exclude=["tests", "tests.*"]),
    classifiers=classifiers,
    python_requires=python_requires,
    install_requires=install_requires,
    extras_require=extras_require,
    entry_points={
        "console_scripts": [
            "vadscope=vadscope.main:main",
        ],
    },
    zip_safe=False,
)
