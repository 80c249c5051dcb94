from setuptools import setup


setup(name='wenogeom',
      version='0.1.0',
      description='Geometric moments, reference frames and smoothness '
                  'indicators for WENO reconstructions on polyhedral meshes',
      license='MIT',
      packages=['wenogeom', 'wenogeom.mesh'],
      python_requires='>=3.9',
      install_requires=[
          'scipy',
          'numpy',
           ],
      extras_require={
          'test': ['pytest'],
      },
      long_description='None',
      long_description_content_type='text/markdown',
      keywords='weno finite-volume unstructured-mesh quadrature',
      classifiers=[
          'Development Status :: 3 - Alpha',

          'Intended Audience :: Science/Research',
          'Intended Audience :: Developers',
          'Topic :: Scientific/Engineering',
          'Topic :: Scientific/Engineering :: Mathematics',

          'License :: OSI Approved :: MIT License',

          'Programming Language :: Python :: 3.9',
      ],
      zip_safe=False)
