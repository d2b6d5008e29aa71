"""
Source-tree synchronizer.

Keeps src/ in step with the template: one folder per Lambda, one folder per
layer under src/layers, the shared authorizer in src/authorizer and table
helpers in src/utils. Called only after the template has been written.
"""

import logging
import os
import shutil
from typing import List

from .resources import sources as boilerplate

logger = logging.getLogger(__name__)

# Folders under src/ owned by something other than a single Lambda
SHARED_FOLDERS = ("utils", "layers", "authorizer")


class SourceTree:
    """File operations on a project's src/ directory."""

    def __init__(self, root: str):
        self.root = root

    def path(self, *parts: str) -> str:
        return os.path.join(self.root, *parts)

    def _write(self, relative_path: str, content: str, overwrite: bool = True) -> bool:
        target = self.path(relative_path)
        if not overwrite and os.path.exists(target):
            logger.debug("Keeping existing %s", target)
            return False
        os.makedirs(os.path.dirname(target), exist_ok=True)
        with open(target, "w", encoding="utf-8") as f:
            f.write(content)
        logger.debug("Wrote %s", target)
        return True

    def _remove_tree(self, relative_path: str) -> bool:
        target = self.path(relative_path)
        if not os.path.isdir(target):
            return False
        shutil.rmtree(target)
        logger.debug("Removed %s", target)
        return True

    def _remove_file(self, relative_path: str) -> bool:
        target = self.path(relative_path)
        if not os.path.isfile(target):
            return False
        os.remove(target)
        logger.debug("Removed %s", target)
        return True

    def folders(self) -> List[str]:
        if not os.path.isdir(self.root):
            return []
        return sorted(entry for entry in os.listdir(self.root) if os.path.isdir(self.path(entry)))

    # Lambdas

    def write_initial_lambda(self, folder: str, function_name: str):
        self._write(os.path.join(folder, "handler.ts"), boilerplate.initial_handler(function_name))
        self._write(os.path.join(folder, "handler.test.ts"), boilerplate.initial_handler_test(function_name))
        self._write(os.path.join("utils", "greet.ts"), boilerplate.GREET)
        self._write(os.path.join("utils", "greet.test.ts"), boilerplate.GREET_TEST)

    def write_lambda(self, name: str):
        self._write(os.path.join(name, "handler.ts"), boilerplate.lambda_handler(name))
        self._write(os.path.join(name, "handler.test.ts"), boilerplate.lambda_handler_test(name))

    def lambda_folder_taken(self, name: str) -> bool:
        return name in SHARED_FOLDERS or os.path.exists(self.path(name))

    def remove_lambda(self, folder: str) -> bool:
        if folder in SHARED_FOLDERS:
            logger.warning("Not removing shared folder %s", self.path(folder))
            return False
        return self._remove_tree(folder)

    def handler_path(self, folder: str) -> str:
        return self.path(folder, "handler.ts")

    # Authorizer

    def write_authorizer(self) -> bool:
        """Copy the basic authorizer pair. No-op when already present."""
        wrote = self._write(os.path.join("authorizer", "authorizer.ts"), boilerplate.AUTHORIZER, overwrite=False)
        wrote = self._write(os.path.join("authorizer", "authorizer.test.ts"), boilerplate.AUTHORIZER_TEST,
                            overwrite=False) or wrote
        return wrote

    def remove_authorizer(self) -> bool:
        return self._remove_tree("authorizer")

    # Layers

    def write_layer(self, layer_name: str):
        folder = os.path.join("layers", layer_name)
        self._write(os.path.join(folder, f"{layer_name}Functions.ts"), boilerplate.layer_functions(layer_name))
        self._write(os.path.join(folder, f"{layer_name}Functions.test.ts"),
                    boilerplate.layer_functions_test(layer_name))

    def remove_layer(self, layer_name: str) -> bool:
        removed = self._remove_tree(os.path.join("layers", layer_name))
        layers_dir = self.path("layers")
        if os.path.isdir(layers_dir) and not os.listdir(layers_dir):
            os.rmdir(layers_dir)
            logger.debug("Removed empty %s", layers_dir)
        return removed

    # Tables

    def write_table(self, table_name: str, full_table_name: str, partition_key: str, sort_key: str = ""):
        self._write(os.path.join("utils", f"{table_name}Handler.ts"),
                    boilerplate.table_handler(table_name, full_table_name, partition_key, sort_key))
        self._write(os.path.join("utils", f"{table_name}Handler.spec.ts"),
                    boilerplate.table_handler_test(table_name, partition_key, sort_key))

    def remove_table(self, table_name: str):
        self._remove_file(os.path.join("utils", f"{table_name}Handler.ts"))
        self._remove_file(os.path.join("utils", f"{table_name}Handler.spec.ts"))

    def add_table_import(self, folder: str, table_name: str) -> bool:
        """
        Add the table helper import after the last import of a handler.

        Returns:
            True when the file changed
        """
        handler = self.handler_path(folder)
        if not os.path.isfile(handler):
            logger.warning("Handler %s not found, skipping import of %s", handler, table_name)
            return False
        with open(handler, "r", encoding="utf-8") as f:
            lines = f.read().split("\n")

        marker = f"from '{boilerplate.table_import_path(table_name)}'"
        if any(marker in line for line in lines):
            return False

        last_import = -1
        for i, line in enumerate(lines):
            if line.startswith("import "):
                last_import = i
        lines.insert(last_import + 1, boilerplate.table_import(table_name))

        with open(handler, "w", encoding="utf-8") as f:
            f.write("\n".join(lines))
        return True

    def remove_table_import(self, folder: str, table_name: str) -> bool:
        handler = self.handler_path(folder)
        if not os.path.isfile(handler):
            return False
        with open(handler, "r", encoding="utf-8") as f:
            lines = f.read().split("\n")

        marker = f"from '{boilerplate.table_import_path(table_name)}'"
        kept = [line for line in lines if marker not in line]
        if len(kept) == len(lines):
            return False

        with open(handler, "w", encoding="utf-8") as f:
            f.write("\n".join(kept))
        return True
