from setuptools import setup
about = {}
with open("medarch/__version__.py") as f:
    exec(f.read(), about)


setup(
    name="medarch",
    version=about["__version__"],
    description="Archive photo, audio and video files into a destination folder with collision-safe names.",
    author="gabbro246",
    packages=["medarch"],
    install_requires=[
        "colorama>=0.4.6",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": [
            "medarch=medarch.archive:main",
        ]
    },
    include_package_data=True,
    python_requires=">=3.10",
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
)
