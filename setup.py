"""
Setup script for GD - Distributed Gradient Descent.
"""

from setuptools import setup, find_packages
import os


# Read requirements
def read_requirements():
    req_path = os.path.join(os.path.dirname(__file__), 'requirements.txt')
    with open(req_path) as f:
        return [line.strip() for line in f if line.strip() and not line.startswith('#')]


# Read README
def read_readme():
    readme_path = os.path.join(os.path.dirname(__file__), 'README.md')
    with open(readme_path, encoding='utf-8') as f:
        return f.read()


setup(
    name='gd',
    version='0.1.0',
    description='Distributed gradient descent over partitioned datasets',
    long_description=read_readme(),
    long_description_content_type='text/markdown',
    author='GD Team',
    author_email='',
    packages=find_packages(exclude=['tests', 'tests.*', 'examples']),
    python_requires='>=3.8',
    install_requires=read_requirements(),
    extras_require={
        'pytorch': ['torch'],
        'test': ['pytest'],
    },
    entry_points={
        'console_scripts': [
            'gd-train=gd.train:main',
            'gd-worker=gd.worker.__main__:main',
        ],
    },
    classifiers=[
        'Development Status :: 3 - Alpha',
        'Intended Audience :: Science/Research',
        'Intended Audience :: Developers',
        'License :: OSI Approved :: MIT License',
        'Programming Language :: Python :: 3',
        'Programming Language :: Python :: 3.8',
        'Programming Language :: Python :: 3.9',
        'Programming Language :: Python :: 3.10',
        'Programming Language :: Python :: 3.11',
        'Programming Language :: Python :: 3.12',
        'Topic :: Scientific/Engineering :: Artificial Intelligence',
    ],
    keywords='distributed machine-learning sgd gradient-descent optimization',
)
