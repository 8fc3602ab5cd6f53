# Configuration file for the Sphinx documentation builder.
#
# For the full list of built-in configuration values, see the documentation:
# https://www.sphinx-doc.org/en/master/usage/configuration.html

import os
import sys

# Project root, so that `edc_catalog` is importable by autodoc
PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '../../'))

sys.path.insert(0, PROJECT_ROOT)

# -- Project information -----------------------------------------------------

project = 'EDC Catalog'
author = 'EDC Catalog contributors'
release = '0.1.0'

# -- General configuration ---------------------------------------------------

extensions = [
    'sphinx.ext.autodoc',
    'sphinx.ext.napoleon',          # Google-style docstrings
    'sphinx_autodoc_typehints',
    'myst_parser',                  # Markdown sources
]

source_suffix = {
    '.rst': 'restructuredtext',
    '.md': 'markdown',
}

templates_path = ['_templates']
exclude_patterns = []

# -- Options for HTML output -------------------------------------------------

html_theme = 'sphinx_rtd_theme'

html_theme_options = {
    'collapse_navigation': False,
    'navigation_depth': 4,
}

# -- Autodoc configuration ---------------------------------------------------

autoclass_content = 'both'
autodoc_member_order = 'bysource'
autodoc_default_options = {
    'members': True,
    'undoc-members': False,
    'private-members': False,
    'show-inheritance': True,
}
