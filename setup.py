"""
Setup script for LAN Chat - Terminal-based encrypted group chat for the local network.

Created by orpheus497

This chat client provides:
- Zero-configuration peer discovery over IPv4 multicast
- AES-256-GCM encryption under a shared passphrase
- Cross-platform terminal UI (Linux, Windows, macOS)
- Clipboard export, clickable links and chat log snapshots
"""

from setuptools import setup, find_packages
import os

this_directory = os.path.abspath(os.path.dirname(__file__))
with open(os.path.join(this_directory, 'README.md'), encoding='utf-8') as f:
    long_description = f.read()

setup(
    name='lanchat',
    version='1.0.0',
    author='orpheus497',
    description='A terminal-based encrypted group chat over LAN multicast with a shared passphrase',
    long_description=long_description,
    long_description_content_type='text/markdown',
    package_dir={'': 'src'},
    packages=find_packages(where='src'),
    classifiers=[
        'Development Status :: 4 - Beta',
        'Intended Audience :: End Users/Desktop',
        'Topic :: Communications :: Chat',
        'Topic :: Security :: Cryptography',
        'License :: OSI Approved :: MIT License',
        'Programming Language :: Python :: 3',
        'Programming Language :: Python :: 3.9',
        'Programming Language :: Python :: 3.10',
        'Programming Language :: Python :: 3.11',
        'Programming Language :: Python :: 3.12',
        'Operating System :: OS Independent',
        'Environment :: Console',
    ],
    python_requires='>=3.9',
    install_requires=[
        'textual>=0.47.0',
        'cryptography>=42.0.4',
        'rich>=13.7.0',
        'pyperclip>=1.8.2',
        'tomli>=2.0.1; python_version < "3.11"',
    ],
    extras_require={
        'test': [
            'pytest>=7.4.0',
        ],
    },
    entry_points={
        'console_scripts': [
            'lanchat=lanchat.main:main',
        ],
    },
)
