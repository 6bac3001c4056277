"""Read and write model fitting configuration files

Configuration files are JSON documents with the structure of
`_DEFAULT_CONFIG`.  Sections missing from a file are taken from the
defaults.

"""
import copy
import json

__all__ = ["dump_config_template", "dump_config", "read_config"]

_DEFAULT_CONFIG = {
    'log_level': "INFO",
    'model': {
        'type': "rem",
        'formula': "~ 1"
    },
    'optimizer': {
        'method': "BFGS",
        'maxiter': 1000,
        'gtol': 1e-6
    },
    'on_failure': "flag",
    'offsets': {
        'required': False,
        'duration': 10,
        'max_distance': "inf"
    }
}

_DUMP_INDENT = 4


def _merge(defaults, updates):
    """Recursively update a copy of `defaults` with `updates`"""
    merged = copy.deepcopy(defaults)
    for key, val in updates.items():
        if isinstance(val, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], val)
        else:
            merged[key] = val
    return(merged)


def dump_config_template(fname):
    """Write the default configuration as a template file

    Parameters
    ----------
    fname : str or file-like
        A valid string path, or `file-like` object, for output file.

    Examples
    --------
    >>> dump_config_template("cmulti_config.json")  # doctest: +SKIP

    Edit the file to your specifications.

    """
    dump_config(fname, _DEFAULT_CONFIG)


def read_config(config_file=None):
    """Read configuration file, filling in defaults

    Parameters
    ----------
    config_file : str or file-like, optional
        A valid string path, or `file-like` object, for input file.  The
        default configuration is returned if not given.

    Returns
    -------
    out : dict

    """
    if config_file is None:
        return(copy.deepcopy(_DEFAULT_CONFIG))

    with open(config_file, "r") as ifile:
        config = json.load(ifile)

    return(_merge(_DEFAULT_CONFIG, config))


def dump_config(fname, config_dict):
    """Write configuration dictionary to a JSON file

    Parameters
    ----------
    fname : str or file-like
        A valid string path, or `file-like` object, for output file.
    config_dict : dict
        Dictionary to dump.

    """
    with open(fname, "w") as ofile:
        json.dump(config_dict, ofile, indent=_DUMP_INDENT)
