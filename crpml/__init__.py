"""crpml -- scaffold packages from templates built out of mergeable variants.

Quick usage::

    from crpml.config import load_config
    from crpml.scaffold import Answers, Scaffolder

    config = await load_config()
    result = await Scaffolder(config).run(
        Answers(package_name="my-lib", template_id="library", variant_ids=["eslint"])
    )
"""

__version__ = "0.1.0"
