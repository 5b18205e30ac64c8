"""
Render turntable previews of a shelf preset: a PDF contact sheet of frames
around a full turn, and single SVG frames that use the engine's path
strings and fixed view box as-is.
"""

import logging
from pathlib import Path
from typing import List, Optional, Sequence

import numpy as np
import matplotlib.pyplot as plt
from matplotlib.backends.backend_pdf import PdfPages
import svgwrite

import config
import engines
from geometry import points_to_path
from shelf_generator import ShelfGeometry

logger = logging.getLogger(__name__)

ShelfConfig = config.ShelfConfig

# Stroke colours per layer
LAYER_STYLES = {
    'contours': {'color': '#c8c8c8', 'width': 0.15},
    'curves': {'color': '#e07a1f', 'width': 0.25},
    'columns': {'color': '#2b5d8a', 'width': 0.4},
    'shelves': {'color': '#1b1b1b', 'width': 0.5},
}


class PreviewGenerator:
    """Draws projected shelf geometry to PDF and SVG."""

    def __init__(self, shelf_config: ShelfConfig):
        """
        Initialize preview generator.

        Args:
            shelf_config: ShelfConfig preset to render
        """
        self.config = shelf_config
        self.engine = engines.get_engine(shelf_config.engine)
        self.params = engines.engine_params(shelf_config)
        self.geometry = self.engine.generate_geometry(self.params)
        self.view_box = self.engine.fixed_view_box(self.params)

    def project(self, angle: float) -> ShelfGeometry:
        """Geometry rotated by angle (radians) and projected to screen space."""
        return self.engine.project_geometry(self.geometry, angle, self.params)

    @staticmethod
    def layers(projected: ShelfGeometry):
        """(layer name, polylines) pairs in back-to-front drawing order."""
        return [
            ('contours', list(projected.contours)),
            ('curves', list(projected.curves)),
            ('columns', [line for piece in projected.columns for line in piece.polylines()]),
            ('shelves', [line for piece in projected.shelves for line in piece.polylines()]),
        ]

    def draw_frame(self, ax: plt.Axes, angle: float, title: Optional[str] = None) -> None:
        """
        Draw one projected frame into a matplotlib axes.

        Args:
            ax: Matplotlib axes to draw on
            angle: Rotation in radians
            title: Optional axes title
        """
        projected = self.project(angle)
        for name, lines in self.layers(projected):
            style = LAYER_STYLES[name]
            for line in lines:
                ax.plot(line[:, 0], line[:, 1], color=style['color'],
                        linewidth=style['width'] * 2)

        vb = self.view_box
        ax.set_xlim(vb.min_x, vb.max_x)
        # Screen y grows downward
        ax.set_ylim(vb.max_y, vb.min_y)
        ax.set_aspect('equal', adjustable='box')
        ax.axis('off')
        if title:
            ax.set_title(title, fontsize=9)

    def export_svg(self, filepath: Path, angle: float) -> Path:
        """
        Export one frame as an SVG file.

        Args:
            filepath: Output .svg path
            angle: Rotation in radians

        Returns:
            The written path
        """
        filepath = Path(filepath)
        filepath.parent.mkdir(parents=True, exist_ok=True)

        vb = self.view_box
        dwg = svgwrite.Drawing(str(filepath), size=('100%', '100%'),
                               viewBox=vb.as_attribute())
        projected = self.project(angle)
        for name, lines in self.layers(projected):
            style = LAYER_STYLES[name]
            group = dwg.g(id=name, fill='none', stroke=style['color'],
                          stroke_width=style['width'], stroke_linecap='round')
            for line in lines:
                group.add(dwg.path(d=points_to_path(line)))
            dwg.add(group)
        dwg.save()
        return filepath

    def export_svg_sequence(self, output_dir: Path, angles: Sequence[float],
                            prefix: str = 'frame') -> List[Path]:
        """
        Export one SVG per angle, numbered in order.

        Returns:
            List of written paths
        """
        output_dir = Path(output_dir)
        written = []
        for i, angle in enumerate(angles):
            written.append(self.export_svg(output_dir / f'{prefix}_{i:04d}.svg', angle))
        logger.debug("Wrote %d SVG frames to %s", len(written), output_dir)
        return written

    def _parameter_text(self) -> str:
        lines = [f'Engine: {self.config.engine}', f'Preset: {self.config.version}', '']
        for name, value in vars(self.params).items():
            lines.append(f'  {name}: {value:.2f}' if isinstance(value, float)
                         else f'  {name}: {value}')
        lines.append('')
        lines.append(f'Shelves: {len(self.geometry.shelves)}   '
                     f'Columns: {len(self.geometry.columns)}')
        lines.append(f'View box: {self.view_box.as_attribute()}')
        return '\n'.join(lines)

    def generate_pdf(self, output_path: Path, frames: int = 12,
                     columns: int = 4) -> int:
        """
        Generate a PDF with a parameter page and a turntable contact sheet.

        Args:
            output_path: Path to save PDF file
            frames: Number of evenly spaced angles over a full turn
            columns: Frames per row on the contact sheet

        Returns:
            Number of pages written
        """
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        angles = np.arange(frames) * (2 * np.pi / max(frames, 1))
        rows = max(1, int(np.ceil(frames / columns)))
        pages = 0

        with PdfPages(output_path) as pdf:
            # Title page
            fig = plt.figure(figsize=(11, 8.5))
            ax = fig.add_subplot(111)
            ax.axis('off')
            ax.text(0.5, 0.6, 'Wavy Shelf Preview\n\n' + self._parameter_text(),
                    transform=ax.transAxes, fontsize=12, ha='center', va='center',
                    family='monospace',
                    bbox=dict(boxstyle='round', facecolor='lightblue', alpha=0.8))
            pdf.savefig(fig, bbox_inches='tight')
            plt.close(fig)
            pages += 1

            # Contact sheet
            fig, axes = plt.subplots(rows, columns, figsize=(11, 8.5), squeeze=False)
            for ax in axes.flat:
                ax.axis('off')
            for ax, angle in zip(axes.flat, angles):
                self.draw_frame(ax, float(angle), title=f'{np.degrees(angle):.0f}°')
            fig.suptitle(f'{self.config.engine} turntable ({frames} frames)')
            pdf.savefig(fig, bbox_inches='tight')
            plt.close(fig)
            pages += 1

        logger.debug("Preview PDF written to %s (%d pages)", output_path, pages)
        return pages

