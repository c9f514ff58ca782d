"""
Query builder configuration for routing form rules.

Routing rules are edited as query trees ({"type": "group", "children1": ...}).
This module holds the configuration describing which fields, widgets and
operators a tree may use, and turns a tree into jsonLogic for evaluation.

Two flavours exist: rules over form fields (FormFieldsConfig) and rules over
team member attributes (AttributesConfig). Attributes additionally support
"contains" / "not contains" on multiselect values.
"""

import logging
from copy import deepcopy
from enum import Enum
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)


class ConfigFor(str, Enum):
    FormFields = "FormFields"
    Attributes = "Attributes"


def _in_reversed(field: dict, _op: str, value: Any) -> dict:
    return {"in": [value, field]}


def _not_in_reversed(field: dict, _op: str, value: Any) -> dict:
    return {"!": {"in": [value, field]}}


def _not_any_in(field: dict, _op: str, value: Any) -> dict:
    return {"!": {"in": [field, value]}}


def _all_in(field: dict, _op: str, value: Any) -> dict:
    return {"all": [field, {"in": [{"var": ""}, value]}]}


def _not_all_in(field: dict, _op: str, value: Any) -> dict:
    return {"!": {"all": [field, {"in": [{"var": ""}, value]}]}}


def _some_in(field: dict, _op: str, value: Any) -> dict:
    return {"some": [field, {"in": [{"var": ""}, value]}]}


def _not_some_in(field: dict, _op: str, value: Any) -> dict:
    return {"!": {"some": [field, {"in": [{"var": ""}, value]}]}}


BasicConfig: dict[str, dict] = {
    "conjunctions": {
        "AND": {"label": "And", "formatConj": "AND", "jsonLogicConj": "and", "reversedConj": "OR"},
        "OR": {"label": "Or", "formatConj": "OR", "jsonLogicConj": "or", "reversedConj": "AND"},
    },
    "operators": {
        "equal": {"label": "==", "labelForFormat": "==", "reversedOp": "not_equal", "jsonLogic": "=="},
        "not_equal": {
            "isNotOp": True,
            "label": "!=",
            "labelForFormat": "!=",
            "reversedOp": "equal",
            "jsonLogic": "!=",
        },
        "less": {"label": "<", "labelForFormat": "<", "reversedOp": "greater_or_equal", "jsonLogic": "<"},
        "less_or_equal": {
            "label": "<=",
            "labelForFormat": "<=",
            "reversedOp": "greater",
            "jsonLogic": "<=",
        },
        "greater": {"label": ">", "labelForFormat": ">", "reversedOp": "less_or_equal", "jsonLogic": ">"},
        "greater_or_equal": {
            "label": ">=",
            "labelForFormat": ">=",
            "reversedOp": "less",
            "jsonLogic": ">=",
        },
        "like": {"label": "Contains", "labelForFormat": "Like", "reversedOp": "not_like", "jsonLogic": _in_reversed},
        "not_like": {
            "isNotOp": True,
            "label": "Not contains",
            "labelForFormat": "Not Like",
            "reversedOp": "like",
            "jsonLogic": _not_in_reversed,
        },
        "between": {
            "label": "Between",
            "labelForFormat": "BETWEEN",
            "cardinality": 2,
            "reversedOp": "not_between",
            "jsonLogic": "<=",
        },
        "not_between": {
            "isNotOp": True,
            "label": "Not between",
            "labelForFormat": "NOT BETWEEN",
            "cardinality": 2,
            "reversedOp": "between",
            "jsonLogic": lambda field, _op, values: {"!": {"<=": [values[0], field, values[1]]}},
        },
        "is_empty": {
            "label": "Is empty",
            "labelForFormat": "IS EMPTY",
            "cardinality": 0,
            "reversedOp": "is_not_empty",
            "jsonLogic": "!",
        },
        "is_not_empty": {
            "isNotOp": True,
            "label": "Is not empty",
            "labelForFormat": "IS NOT EMPTY",
            "cardinality": 0,
            "reversedOp": "is_empty",
            "jsonLogic": "!!",
        },
        "select_equals": {
            "label": "==",
            "labelForFormat": "==",
            "reversedOp": "select_not_equals",
            "jsonLogic": "==",
        },
        "select_not_equals": {
            "isNotOp": True,
            "label": "!=",
            "labelForFormat": "!=",
            "reversedOp": "select_equals",
            "jsonLogic": "!=",
        },
        "select_any_in": {
            "label": "Any in",
            "labelForFormat": "IN",
            "reversedOp": "select_not_any_in",
            "jsonLogic": "in",
        },
        "select_not_any_in": {
            "isNotOp": True,
            "label": "Not in",
            "labelForFormat": "NOT IN",
            "reversedOp": "select_any_in",
            "jsonLogic": _not_any_in,
        },
        "multiselect_equals": {
            "label": "Equals",
            "labelForFormat": "==",
            "reversedOp": "multiselect_not_equals",
            "jsonLogic": _all_in,
        },
        "multiselect_not_equals": {
            "isNotOp": True,
            "label": "Not equals",
            "labelForFormat": "!=",
            "reversedOp": "multiselect_equals",
            "jsonLogic": _not_all_in,
        },
    },
    "widgets": {
        "text": {"type": "text", "jsType": "string", "valueSrc": "value", "valuePlaceholder": "Enter string"},
        "textarea": {
            "type": "text",
            "jsType": "string",
            "valueSrc": "value",
            "valuePlaceholder": "Enter text",
            "fullWidth": True,
        },
        "number": {"type": "number", "jsType": "number", "valueSrc": "value", "valuePlaceholder": "Enter number"},
        "select": {"type": "select", "jsType": "string", "valueSrc": "value", "valuePlaceholder": "Select option"},
        "multiselect": {
            "type": "multiselect",
            "jsType": "array",
            "valueSrc": "value",
            "valuePlaceholder": "Select options",
        },
    },
    "types": {
        "text": {
            "defaultOperator": "equal",
            "widgets": {
                "text": {
                    "operators": ["equal", "not_equal", "like", "not_like", "is_empty", "is_not_empty"],
                },
                "textarea": {
                    "operators": ["equal", "not_equal", "like", "not_like", "is_empty", "is_not_empty"],
                },
            },
        },
        "number": {
            "defaultOperator": "equal",
            "widgets": {
                "number": {
                    "operators": [
                        "equal",
                        "not_equal",
                        "less",
                        "less_or_equal",
                        "greater",
                        "greater_or_equal",
                        "between",
                        "not_between",
                        "is_empty",
                        "is_not_empty",
                    ],
                },
            },
        },
        "select": {
            "defaultOperator": "select_equals",
            "widgets": {
                "select": {
                    "operators": ["select_equals", "select_not_equals", "is_empty", "is_not_empty"],
                },
                "multiselect": {"operators": ["select_any_in", "select_not_any_in"]},
            },
        },
        "multiselect": {
            "defaultOperator": "multiselect_equals",
            "widgets": {
                "multiselect": {
                    "operators": ["multiselect_equals", "multiselect_not_equals", "is_empty", "is_not_empty"],
                },
            },
        },
    },
    "settings": {
        "valueSourcesInfo": {"value": {"label": "Value"}},
        "canReorder": True,
        "canRegroup": True,
        "showNot": True,
        "setOpOnChangeField": ["keep", "default"],
        "clearValueOnChangeField": False,
        "clearValueOnChangeOp": False,
        "maxNesting": None,
    },
}

# Component names the client renders each part of the builder with
WIDGET_COMPONENTS = {
    "text": "TextWidget",
    "textarea": "TextAreaWidget",
    "number": "NumberWidget",
    "multiselect": "MultiSelectWidget",
    "select": "SelectWidget",
    "phone": "TextWidget",
    "email": "EmailWidget",
}


def get_settings(_config_for: ConfigFor) -> dict:
    settings = deepcopy(BasicConfig["settings"])
    settings.update(
        {
            "renderField": "FieldSelect",
            "renderOperator": "FieldSelect",
            "renderFunc": "FieldSelect",
            "renderConjs": "Conjs",
            "renderButton": "Button",
            "renderButtonGroup": "ButtonGroup",
            "renderProvider": "Provider",
            "groupActionsPosition": "bottomCenter",
            # Disable groups
            "maxNesting": 1,
        }
    )
    return settings


def get_widgets(_config_for: ConfigFor) -> dict:
    widgets = deepcopy(BasicConfig["widgets"])
    for name in ("text", "textarea", "number", "multiselect", "select"):
        widgets[name]["factory"] = WIDGET_COMPONENTS[name]

    widgets["phone"] = {
        **deepcopy(BasicConfig["widgets"]["text"]),
        "factory": WIDGET_COMPONENTS["phone"],
        "inputType": "tel",
        "valuePlaceholder": "Enter Phone Number",
    }
    widgets["email"] = {
        **deepcopy(BasicConfig["widgets"]["text"]),
        "factory": WIDGET_COMPONENTS["email"],
        "inputType": "email",
    }
    return widgets


def get_types(_config_for: ConfigFor) -> dict:
    types = deepcopy(BasicConfig["types"])
    types["phone"] = deepcopy(BasicConfig["types"]["text"])
    types["email"] = deepcopy(BasicConfig["types"]["text"])

    multiselect = types["multiselect"]["widgets"]["multiselect"]
    multiselect["operators"] = [
        *(multiselect.get("operators") or []),
        "multiselect_contains",
        "multiselect_not_contains",
    ]
    return types


def get_operators(config_for: ConfigFor) -> dict:
    operators = deepcopy(BasicConfig["operators"])
    # Attributes have no reporting, so they can use contains / not contains
    if config_for == ConfigFor.Attributes:
        operators["multiselect_contains"] = {
            "label": "Contains",
            "labelForFormat": "CONTAINS",
            "reversedOp": "multiselect_not_contains",
            "jsonLogic": _some_in,
        }
        operators["multiselect_not_contains"] = {
            "isNotOp": True,
            "label": "Not contains",
            "labelForFormat": "NOT CONTAINS",
            "reversedOp": "multiselect_contains",
            "jsonLogic": _not_some_in,
            "_jsonLogicIsExclamationOp": True,
        }
    return operators


def get_conjunctions(_config_for: ConfigFor) -> dict:
    return deepcopy(BasicConfig["conjunctions"])


def build_config(config_for: ConfigFor) -> dict:
    return {
        "conjunctions": get_conjunctions(config_for),
        "operators": get_operators(config_for),
        "types": get_types(config_for),
        "widgets": get_widgets(config_for),
        "settings": get_settings(config_for),
    }


FormFieldsConfig = build_config(ConfigFor.FormFields)
AttributesConfig = build_config(ConfigFor.Attributes)


def serializable_config(config: dict) -> dict:
    """Config without the jsonLogic builders, ready to be sent to the client"""
    result = deepcopy(config)
    for operator in result["operators"].values():
        if callable(operator.get("jsonLogic")):
            operator["jsonLogic"] = True
    return result


def _children(node: dict) -> list[dict]:
    children = node.get("children1") or []
    if isinstance(children, dict):
        return list(children.values())
    return list(children)


def _rule_to_json_logic(rule: dict, config: dict) -> Optional[dict]:
    properties = rule.get("properties") or {}
    field = properties.get("field")
    operator_name = properties.get("operator")
    if not field or not operator_name:
        return None

    operator = config["operators"].get(operator_name)
    if not operator:
        logger.warning(f"⚠️ Unknown query builder operator {operator_name!r}, rule skipped")
        return None

    cardinality = operator.get("cardinality", 1)
    values = list(properties.get("value") or [])
    if len(values) < cardinality or any(v is None for v in values[:cardinality]):
        # Incomplete rule, the builder is still being edited
        return None

    field_logic = {"var": field}
    json_logic: Any = operator["jsonLogic"]

    if callable(json_logic):
        builder: Callable[[dict, str, Any], dict] = json_logic
        value = values[0] if cardinality == 1 else values[:cardinality]
        return builder(field_logic, operator_name, value)

    if cardinality == 0:
        return {json_logic: field_logic}
    if cardinality == 2:
        return {json_logic: [values[0], field_logic, values[1]]}
    return {json_logic: [field_logic, values[0]]}


def tree_to_json_logic(tree: Optional[dict], config: dict = FormFieldsConfig) -> Optional[dict]:
    """
    Convert a query tree into jsonLogic.

    Returns None for an empty tree (or one whose rules are all incomplete), which
    callers treat as "matches everything".
    """
    if not tree:
        return None

    if tree.get("type") == "rule":
        return _rule_to_json_logic(tree, config)

    parts = [logic for logic in (tree_to_json_logic(child, config) for child in _children(tree)) if logic]
    if not parts:
        return None

    properties = tree.get("properties") or {}
    conjunction = config["conjunctions"].get(properties.get("conjunction") or "AND")
    conj = conjunction["jsonLogicConj"] if conjunction else "and"

    logic: dict = parts[0] if len(parts) == 1 else {conj: parts}
    if properties.get("not"):
        logic = {"!": logic}
    return logic
