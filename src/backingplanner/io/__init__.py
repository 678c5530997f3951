"""Reading drawing documents and writing detection results."""

from .parser import Drawing, load_drawing, parse_drawing, results_to_dict, save_results

__all__ = ["Drawing", "load_drawing", "parse_drawing", "results_to_dict", "save_results"]
