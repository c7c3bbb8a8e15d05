#!/usr/bin/env python
from setuptools import setup
import os


def get_version():
    curdir = os.path.dirname(__file__)
    filename = os.path.join(curdir, 'src', 'pdf2img', 'version.py')
    with open(filename, 'rb') as fp:
        return fp.read().decode('utf8').split('=')[1].strip(" \n'")


def readme():
    with open('README.rst') as f:
        return f.read()


setup(
    name='pdf2img',
    version=get_version(),
    description='Render the first page of a PDF document to a PNG image',
    long_description=readme(),
    classifiers=[
        'Development Status :: 3 - Alpha',
        'License :: OSI Approved :: MIT License',
        'Programming Language :: Python :: 3',
        'Programming Language :: Python :: 3.10',
        'Programming Language :: Python :: 3.11',
        'Programming Language :: Python :: 3.12',
        'Topic :: Multimedia :: Graphics',
        'Topic :: Multimedia :: Graphics :: Graphics Conversion',
    ],
    keywords='pdf png rasterize thumbnail',
    license='MIT License',
    package_dir={'': 'src'},
    packages=[
        'pdf2img',
        'pdf2img.rasterizer',
    ],
    python_requires='>=3.10',
    install_requires=[
        'pillow>=9.1',
        'pypdfium2>=4',
    ],
    extras_require={
        'test': [
            'pytest'],
    },
    include_package_data=True,
    entry_points={
        'console_scripts': ['pdf2img=pdf2img.__main__:main']
    },
    )
