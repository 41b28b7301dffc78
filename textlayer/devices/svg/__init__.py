# TextLayer - Selectable Text Layers for Vector Page Graphics
# Copyright (c) 2025-2026 Scott Bowman
# SPDX-License-Identifier: AGPL-3.0-or-later

from .svg import TextLayerDevice, render_page, render_text_layer

__all__ = ["TextLayerDevice", "render_page", "render_text_layer"]
