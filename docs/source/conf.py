# Sphinx configuration for the scikit-QPAD documentation.
#
# https://www.sphinx-doc.org/en/master/usage/configuration.html

import sys
from skqpad import __version__

sys.path.append("../skqpad")


# -- Project information -----------------------------------------------------

project = 'skqpad'
copyright = '2026, Sebastian Luque'
author = 'Sebastian Luque'

version = __version__
release = version


# -- General configuration ---------------------------------------------------

extensions = [
    'sphinx.ext.doctest',
    'sphinx.ext.autodoc',
    'sphinx.ext.viewcode',
    'sphinx.ext.autosummary',
    'sphinx.ext.intersphinx',
    'sphinx.ext.napoleon',
    'sphinx.ext.mathjax'
]

master_doc = 'index'
exclude_patterns = ['Thumbs.db', '.DS_Store']
pygments_style = 'sphinx'

# Numbered equations in skqpad.likelihood
math_number_all = False
math_eqref_format = "Eq. {number}"

# autodoc
autodoc_default_options = {
    'members': True,
    'member-order': 'groupwise'
}
autosummary_generate = False


# -- Options for HTML output -------------------------------------------------

html_theme = 'bizstyle'
htmlhelp_basename = 'skqpad_doc'


# -- Options for LaTeX output ------------------------------------------------

latex_documents = [
    (master_doc, 'skqpad.tex', 'skqpad Documentation',
     'Sebastian Luque', 'manual'),
]


# -- Extension configurations ------------------------------------------------

intersphinx_mapping = {
    'python': ('https://docs.python.org/3', None),
    'numpy': ('https://numpy.org/doc/stable', None),
    'scipy': ('https://docs.scipy.org/doc/scipy', None),
    'pandas': ('https://pandas.pydata.org/docs', None),
    'matplotlib': ('https://matplotlib.org/stable', None),
    'statsmodels': ('https://www.statsmodels.org/stable', None),
    'patsy': ('https://patsy.readthedocs.io/en/latest', None),
}
