from typing import List

from .json_parser import JsonRecipeParser
from .parser import ParsedRecipe, ParserContext


class VendorJsonParser(JsonRecipeParser):
    """
    JSON export from a recipe-manager app. Same field mapping as the generic
    parser, plus: list entries holding several newline separated lines are
    split into separate ingredients/steps, and `source` is the vendor label.
    """

    source_label: str = ""
    split_embedded_newlines = True

    def parse(self, content: str, context: ParserContext) -> List[ParsedRecipe]:
        recipes = super().parse(content, context)
        return [r.model_copy(update={"source": self.source_label}) for r in recipes]


class RecipeKeeperParser(VendorJsonParser):
    name = "RecipeKeeperParser"
    source_type = "JSON"
    source_label = "Recipe Keeper"
    priority = 30

    def can_parse(self, content: str, context: ParserContext) -> bool:
        data = self._load_quietly(content)
        if isinstance(data, list):
            data = next((item for item in data if isinstance(item, dict)), None)
        if not isinstance(data, dict):
            return False
        version = data.get("version")
        return (
            "recipeName" in data
            or "recipeIngredients" in data
            or (isinstance(version, str) and "RecipeKeeper" in version)
        )


class PaprikaParser(VendorJsonParser):
    name = "PaprikaParser"
    source_type = "JSON"
    source_label = "Paprika"
    priority = 31

    def can_parse(self, content: str, context: ParserContext) -> bool:
        if (context.file_name or "").lower().endswith(".paprikarecipe"):
            return True
        data = self._load_quietly(content)
        return isinstance(data, dict) and all(k in data for k in ("uid", "name", "ingredients"))
