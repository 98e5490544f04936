from setuptools import find_packages
from setuptools import setup

setup(
    author='Jeffrey Finkelstein',
    author_email='jeffrey.finkelstein@gmail.com',
    #classifiers=[],
    description='Bayesian text classifier using chi-squared combining',
    #download_url='',
    extras_require={'test': ['pytest']},
    install_requires=['blinker', 'lockfile', 'SQLAlchemy>=1.4'],
    #include_package_data=True,
    #keywords=[],
    #license='',
    #long_description='',
    name='fbclassifier',
    platforms='any',
    packages=find_packages(exclude=['tests']),
    python_requires='>=3.8',
    url='http://github.com/jfinkels/fbclassifier',
    version='0.0.1.dev0',
    #zip_safe=False
)
