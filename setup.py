from setuptools import setup, find_packages

setup(
    name='vodpulse',
    version='1.0.0',
    packages=find_packages(include=['vodpulse', 'vodpulse.*']),
    install_requires=[
        'httpx>=0.27.2',
        'tqdm>=4.66.6',
    ],
    extras_require={
        'gui': [
            'customtkinter>=5.2.2',
            'darkdetect>=0.8.0',
        ],
        'test': [
            'pytest>=8.0',
        ],
    },
    entry_points={
        'console_scripts': [
            'vodpulse=vodpulse.cli:main',
            'vodpulse-gui=vodpulse.gui:main',
        ],
    },
    python_requires=">=3.9",
)
