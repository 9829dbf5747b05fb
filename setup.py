from setuptools import setup, find_packages

setup(
    name='tilefetch',
    version='0.1.0',
    package_dir={'': 'src'},
    packages=find_packages('src'),
    python_requires='>=3.9',
    install_requires=[
        'boto3',
        'botocore',
        'requests',
        'urllib3',
        'PyYAML',
        'rich',
        'platformdirs',
    ],
    extras_require={
        'test': [
            'pytest<9',
            'pytest-mock',
            's3transfer',
        ],
    },
    # Include other metadata as needed
)
