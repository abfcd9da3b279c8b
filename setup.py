from setuptools import setup, find_packages

setup(
    name="lyrics-timeline",
    version="0.1.0",
    description="Parse, edit, locate and export singer-tagged LRC lyrics timelines",
    long_description=open("README.md", encoding="utf-8").read(),
    long_description_content_type="text/markdown",
    python_requires=">=3.10",
    license="MIT",
    packages=find_packages(exclude=("tests", "tests.*")),
    package_data={"lyrics_timeline": ["py.typed"], "lyrics_timeline.i18n": ["*.json"]},
    install_requires=[
        "typer",
    ],
    extras_require={
        "dev": [
            "pytest",
            "black",
            "ruff",
            "mypy",
        ]
    },
    entry_points={
        "console_scripts": [
            "lyrics-timeline=lyrics_timeline.cli:main",
        ]
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: End Users/Desktop",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Multimedia :: Sound/Audio",
        "Topic :: Text Processing",
    ],
    keywords="lyrics lrc srt karaoke singer timeline editor",
)
