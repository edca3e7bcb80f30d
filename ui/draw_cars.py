#!/usr/bin/env python3
"""Car sprites, debug state tint, heading triangle, turn intent and the
selected-car info card (mixin)."""

from __future__ import annotations

from typing import Any, Mapping, Optional, Sequence

import pygame

from traffic.network import Direction

from .helpers import draw_alpha_rect, render_text


class CarRenderer:
    """Mixin that draws every car of a snapshot."""

    def draw_cars(
        self,
        surface: pygame.Surface,
        cars: Sequence[Mapping[str, Any]],
        road_width: float,
        selected_id: Optional[int] = None,
    ) -> None:
        size = max(2, int(road_width * self.CAR_SIZE_RATIO))
        for car in cars:
            self._draw_car(surface, car, size, car["id"] == selected_id)
        if self.show_debug and selected_id is not None:
            selected = next((c for c in cars if c["id"] == selected_id), None)
            if selected is not None:
                self._draw_car_card(surface, selected, size)

    def _draw_car(self, surface: pygame.Surface, car: Mapping[str, Any], size: int, selected: bool) -> None:
        x, y = car["x"], car["y"]
        rect = pygame.Rect(int(x - size / 2), int(y - size / 2), size, size)

        if not self.show_debug:
            color = self.CAR_COLORS[car["color"] % len(self.CAR_COLORS)]
            pygame.draw.rect(surface, color, rect)
            return

        tint = self.CAR_STATE_COLORS.get(car["state"])
        if tint is not None:
            draw_alpha_rect(surface, tint, rect)

        if car.get("next_direction"):
            dx, dy = Direction(car["next_direction"]).vector
            length = size * self.NEXT_DIR_LINE_RATIO
            pygame.draw.line(
                surface, self.DEBUG_NEXT_DIR_COLOR,
                (int(x), int(y)), (int(x + dx * length), int(y + dy * length)), 4,
            )

        dx, dy = Direction(car["direction"]).vector
        half = size / 2
        tip = (x + dx * half, y + dy * half)
        left = (x - dy * half, y + dx * half)
        right = (x + dy * half, y - dx * half)
        pygame.draw.polygon(surface, (0, 0, 0), (tip, left, right), width=1)

        if selected:
            pygame.draw.rect(surface, self.SELECTED_OUTLINE, rect.inflate(4, 4), width=2)

    def _draw_car_card(self, surface: pygame.Surface, car: Mapping[str, Any], size: int) -> None:
        if self.font_tiny is None:
            return
        junction = car.get("junction")
        lines = [
            f"Car ID: {car['id']}",
            f"State: {car['state']}",
            f"Claim: {car['claim'] or 'none'}",
            f"Waiting cycles: {car['waiting_cycles']}",
            f"Direction: {car['direction']}",
            f"Next direction: {car['next_direction'] or 'none'}",
            f"Position: ({car['x']:.0f}, {car['y']:.0f})",
            f"In junction: {junction if junction is not None else 'no'}",
        ]
        line_h = 14
        card = pygame.Rect(int(car["x"] + size), int(car["y"]), 170, line_h * len(lines) + 10)
        card.clamp_ip(surface.get_rect())
        draw_alpha_rect(surface, (0, 0, 0, 200), card)
        ty = card.y + 5
        for line in lines:
            render_text(surface, self.font_tiny, line, (card.x + 5, ty), (255, 255, 255))
            ty += line_h
