from importlib.resources import files
import yaml

def load_yaml_resource(path: str) -> dict:
    return yaml.safe_load(files("vendorgate.rules").joinpath(path).read_text(encoding="utf-8"))

CATEGORY_RULES = load_yaml_resource("categories.yaml")["categories"]
