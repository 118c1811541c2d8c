"""create-react-prototype -- bootstraps React component-library projects.

Quick usage::

    create-react-prototype init --yes --packageManager yarn

or programmatically::

    from create_react_prototype.initializer import Initializer

    await Initializer.create(options).run()
"""

__version__ = "0.9.0"

PACKAGE_NAME = "create-react-prototype"

__all__ = ["PACKAGE_NAME", "__version__"]
