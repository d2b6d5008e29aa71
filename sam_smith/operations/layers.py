"""
Lambda layer operations.
"""

import logging
from typing import Dict, List

from .. import resources
from ..errors import ConflictError, ResourceNotFoundError
from ..project import SamProject, check_name
from ..template import LAYER

logger = logging.getLogger(__name__)


def _ref(name: str) -> str:
    return f"!Ref {name}"


def create_layer(project: SamProject, name: str):
    """Add a LayerVersion resource and its src/layers/<name>/ files."""
    check_name(name, "layer")
    with project.transaction() as template:
        if template.resource(name) is not None:
            raise ConflictError(f"Resource {name} already exists")
        template.add_resource(resources.LAYER_VERSION.format(layer_name=name, runtime=project.settings.runtime))

    project.sources.write_layer(name)
    logger.info("Created layer %s", name)


def delete_layer(project: SamProject, name: str):
    """
    Delete a layer that no function uses.

    Raises:
        ConflictError: listing the functions the layer is still attached to
    """
    with project.transaction() as template:
        template.require(name, LAYER, "Layer")
        attached = template.referrers(name, kind="layer")
        if attached:
            raise ConflictError(f"Layer {name} is attached to: {', '.join(attached)}", referrers=attached)
        template.remove_resource(name)

    project.sources.remove_layer(name)
    logger.info("Deleted layer %s", name)


def attach_layer(project: SamProject, lambda_name: str, layer: str):
    with project.transaction() as template:
        template.require(layer, LAYER, "Layer")
        function = project.function_resource(template, lambda_name)
        if _ref(layer) in template.list_items(function, "Layers"):
            raise ConflictError(f"Layer {layer} is already attached to {function.key}")
        template.add_list_item(function, "Layers", _ref(layer))
    logger.info("Attached layer %s to %s", layer, function.key)


def detach_layer(project: SamProject, lambda_name: str, layer: str):
    with project.transaction() as template:
        function = project.function_resource(template, lambda_name)
        if not template.remove_list_item(function, "Layers", _ref(layer)):
            raise ResourceNotFoundError(f"Layer {layer} is not attached to {function.key}")
    logger.info("Detached layer %s from %s", layer, function.key)


def list_layers(project: SamProject) -> Dict[str, List[str]]:
    """Layer name -> functions using it."""
    template = project.load_template()
    return {node.key: template.referrers(node.key, kind="layer") for node in template.layers()}
