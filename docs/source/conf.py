# Configuration file for the Sphinx documentation builder.
#
# For the full list of built-in configuration values, see the documentation:
# https://www.sphinx-doc.org/en/master/usage/configuration.html

# -- Project information -----------------------------------------------------
# https://www.sphinx-doc.org/en/master/usage/configuration.html#project-information

import os
import sys
import sphinx_rtd_dark_mode

# Add the project root to sys.path so autodoc can import traffic/ and ui/
sys.path.insert(0, os.path.abspath("../.."))  # conf.py lives in docs/source

project = 'gridtraffic'
copyright = '2026, gridtraffic contributors'
author = 'gridtraffic contributors'
release = '0.1.0'

# -- General configuration ---------------------------------------------------
# https://www.sphinx-doc.org/en/master/usage/configuration.html#general-configuration

extensions = [
    "sphinx.ext.autodoc",    # generate docs from docstrings
    "sphinx.ext.napoleon",   # parse Google/NumPy style docstrings
    "sphinx.ext.viewcode",   # add links to source code
    "sphinx_rtd_dark_mode"
]

autodoc_default_options = {
    "members": True,
    "undoc-members": False,
    "show-inheritance": True,
}
napoleon_numpy_docstring = True

templates_path = ['_templates']
exclude_patterns = []

# -- Options for HTML output -------------------------------------------------
# https://www.sphinx-doc.org/en/master/usage/configuration.html#options-for-html-output

html_theme = "sphinx_rtd_theme"
default_dark_mode = True
html_static_path = ['_static']

# -- Mock imports so the docs build without a display stack --
autodoc_mock_imports = ["pygame"]
