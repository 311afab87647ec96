from setuptools import setup, find_packages

setup(
    name="critical-css",
    version="1.0.0",
    packages=find_packages(),
    install_requires=[
        'beautifulsoup4>=4.12',
        'soupsieve>=2.3',
        'tinycss2>=1.3',
        'csscompressor',
        'aiofiles',
        'orjson',
        'colorama',
        'chardet',
        'tqdm',
    ],
    extras_require={
        'test': [
            'pytest',
            'pytest-cov',
        ],
    },
    entry_points={
        'console_scripts': [
            'critical-css=critical_css.cli:main',
        ],
    },
    python_requires='>=3.8',
    author="Kenneth Hanks",
    author_email="fourfigs@gmail.com",
    description="Inline the critical CSS of HTML pages and defer the rest",
    long_description=open('README.md').read(),
    long_description_content_type="text/markdown",
    url="https://github.com/fourfigs/critical-css",
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
)
