#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Word Chain (pygame edition): reveal a chain of linked words drawn as a letter graph.

How to run
----------
$ python wordchain.py [--length 3] [--seed 42] [--words words5.txt]

Requires: Python 3.9+, numpy, pygame.

Controls
--------
- Drag a letter from the legend onto the node you think holds that letter.
- Hint (H): reveal every occurrence of a random hidden letter.
- Reveal (R): show the whole chain (give up).
- Next (N): start a new puzzle.
- Quit: press ESC or close the window.

Notes
-----
- Each word starts with the last letter of the previous word. Every distinct letter
  is drawn once as a node; every letter-to-letter step inside a word is an arrow
  coloured by its word.
- A wrong drop counts as an error only while the letter on the target node has not
  been revealed anywhere yet.
- Curved arrows that would share the same span are pushed onto separate lanes, and
  arrow tips are clipped exactly at the node circle.
"""
import argparse
import logging
import math
import random
import re
import sys
import time
from collections import defaultdict, namedtuple
from pathlib import Path

import asyncio

import numpy as np
import pygame

logger = logging.getLogger(__name__)

# --------------------------- Configuration ------------------------------------

WINDOW_W, WINDOW_H = 1100, 720
FPS = 60

WORD_FILE = Path(__file__).with_name("words5.txt")
DEFAULT_CHAIN_LEN = 3
MIN_CHAIN_LEN, MAX_CHAIN_LEN = 2, 5
ALLOWED_WORD_LENS = frozenset({3, 4, 5})
MAX_ATTEMPTS = 1500

FALLBACK_WORDS = [
    "able", "echo", "oval", "lava", "ally", "yarn", "nope", "eager", "ramp", "palm",
    "mood", "dome", "else", "eels", "sour", "ruse", "art", "tin", "nut", "tea",
    "ant", "toe", "east", "star", "rain", "near", "ear", "red", "dart", "tent",
    "eat", "trap", "path", "hat", "note", "tone", "sea", "arm", "mat", "tame",
]

WHITE = (255, 255, 255)
BLACK = (0, 0, 0)
NODE_COLOR = (50, 100, 200)
START_COLOR = (50, 180, 50)
END_COLOR = (200, 60, 60)
LEGEND_BG = (248, 248, 252)
LEGEND_BORDER = (150, 150, 165)
TOOLTIP_BG = (255, 255, 255)
TOOLTIP_BORDER = (120, 120, 140)
HOVER_RING = (30, 30, 30)
BTN_TEXT = (0, 0, 0)
BTN_BG = (230, 230, 230)
BTN_BG_HOVER = (210, 210, 210)
BTN_BORDER = (100, 100, 100)
BANNER_BG = (245, 255, 245)
BANNER_FG = (60, 150, 60)
TOAST_COLOR = (170, 40, 40)
OVERLAY_SHADE = (0, 0, 0, 140)

# one colour per word of the chain, cycled
WORD_EDGE_COLORS = [
    (0, 120, 215),
    (200, 120, 0),
    (140, 0, 200),
    (0, 150, 120),
    (170, 60, 60),
]

EDGE_ALPHA_IDLE = 0.42
EDGE_ALPHA_FOCUS = 0.9
EDGE_ALPHA_DIM = 0.25
EDGE_W = 3

NODE_R = 22
LEGEND_NODE_R = 16
LANE_SPACING = 22
MAX_LANE_BOOST = 6

LEFT_MARGIN = 40
RIGHT_MARGIN = 310   # legend panel
MIN_USABLE_W = 220

STRAIGHT_HEAD = (16, 10)   # (length, half width)
CURVE_HEAD = (18, 10)
LOOP_HEAD = (12, 8)

CLIP_SCAN_STEPS = 30
CLIP_BISECT_STEPS = 28
CURVE_SAMPLES = 34
LOOP_SAMPLES = 24

LEGEND_ROWS_PER_COL = 8
TOAST_MS = 2500

ACTIONS = [
    ("Hint", "hint"),
    ("Reveal", "reveal"),
    ("How To Play", "howto"),
    ("Next", "next"),
    ("Quit", "quit"),
]

HOWTO_LINES = [
    "How To Play",
    "",
    "The hidden words form a chain: each word starts with",
    "the last letter of the word before it.",
    "Every distinct letter is one circle. Arrows follow the",
    "letters of each word, one colour per word.",
    "Drag a letter from the legend onto the circle it belongs to.",
    "A wrong drop on a still-unknown letter counts as an error.",
    "Hint reveals a random letter, Reveal shows the answer.",
    "",
    "Click anywhere to close.",
]

# --------------------------- Utilities ----------------------------------------

def set_seed(seed=None):
    if seed is None:
        seed = random.randrange(1 << 30)
    random.seed(seed)
    return seed

def format_elapsed(seconds):
    s = max(0, int(seconds))
    return f"{s // 60}:{s % 60:02d}"

def point_in_circle(pos, center, radius):
    return math.hypot(pos[0] - center[0], pos[1] - center[1]) <= radius

# --------------------------- Word source --------------------------------------

_WORD_RE = re.compile(r"^[a-z]+$")

def clean_word(s):
    return (s or "").strip().lower()

def filter_words(lines):
    """Lowercase, keep alphabetic words of an allowed length, drop duplicates (first wins)."""
    seen = set()
    words = []
    for line in lines:
        w = clean_word(line)
        if not w or not _WORD_RE.match(w) or len(w) not in ALLOWED_WORD_LENS:
            continue
        if w in seen:
            continue
        seen.add(w)
        words.append(w)
    return words

def load_words(path=WORD_FILE, chain_len=DEFAULT_CHAIN_LEN):
    """
    Read a word list, falling back to FALLBACK_WORDS when the file is unusable or
    its words cannot form a chain of `chain_len`.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            words = filter_words(f)
    except (OSError, UnicodeDecodeError) as e:
        logger.warning(f"Could not load {path}: {e}. Using fallback list.")
        return list(FALLBACK_WORDS)
    if not words:
        logger.warning(f"No usable words in {path}. Using fallback list.")
        return list(FALLBACK_WORDS)
    try:
        # private rng so the check leaves the seeded global stream alone
        generate_chain(words, chain_len, rng=random.Random(0))
    except GenerationFailure:
        logger.warning(f"{len(words)} word(s) in {path} cannot form a chain of {chain_len}. "
                       f"Using fallback list.")
        return list(FALLBACK_WORDS)
    logger.info(f"Loaded {len(words)} words from {path}")
    return words

# --------------------------- Chain generation ---------------------------------

class GenerationFailure(RuntimeError):
    """No valid chain could be built from the pool within the attempt budget."""


def is_valid_chain(chain):
    if not chain or not MIN_CHAIN_LEN <= len(chain) <= MAX_CHAIN_LEN:
        return False
    if len(set(chain)) != len(chain):
        return False
    for w in chain:
        if not isinstance(w, str) or not _WORD_RE.match(w) or len(w) not in ALLOWED_WORD_LENS:
            return False
    return all(chain[i][-1] == chain[i + 1][0] for i in range(len(chain) - 1))

def _try_chain(words, by_first, n, rng):
    if len(words) < n:
        return None
    chain = [rng.choice(words)]
    used = {chain[0]}
    for _ in range(1, n):
        options = [w for w in by_first.get(chain[-1][-1], ()) if w not in used]
        if not options:
            return None
        w = rng.choice(options)
        chain.append(w)
        used.add(w)
    return chain

def generate_chain(pool, n=DEFAULT_CHAIN_LEN, max_attempts=MAX_ATTEMPTS, rng=None):
    """
    Build a chain of `n` distinct words where every word starts with the previous
    word's last letter. Each attempt restarts from a fresh random word; the first
    complete chain wins. Raises GenerationFailure once `max_attempts` are spent.
    """
    if not MIN_CHAIN_LEN <= n <= MAX_CHAIN_LEN:
        raise ValueError(f"Chain length must be between {MIN_CHAIN_LEN} and {MAX_CHAIN_LEN}, got {n}")
    rng = rng or random
    words = sorted({w for w in pool if w})
    by_first = defaultdict(list)
    for w in words:
        by_first[w[0]].append(w)

    for attempt in range(max_attempts):
        chain = _try_chain(words, by_first, n, rng)
        if chain is not None:
            logger.debug(f"Chain found after {attempt + 1} attempt(s): {chain}")
            return chain
    raise GenerationFailure(
        f"Could not create a chain of {n} words from {len(words)} words. Add more words."
    )

# --------------------------- Letter graph -------------------------------------

Edge = namedtuple('Edge', 'a b wi')

def letter_sequence(chain):
    if not chain:
        return []
    seq = list(chain[0])
    for w in chain[1:]:
        seq.extend(w[1:])
    return seq

def derive_graph(chain):
    """Unique letters in first-appearance order, plus one edge per letter step per word."""
    order = []
    for ch in letter_sequence(chain):
        if ch not in order:
            order.append(ch)
    edges = []
    for wi, w in enumerate(chain):
        for i in range(len(w) - 1):
            edges.append(Edge(w[i], w[i + 1], wi))
    return order, edges

# --------------------------- Reveal tracking ----------------------------------

class RevealTracker:
    """Which letter positions of each word the player can see."""

    def __init__(self, chain):
        self.chain = list(chain)
        self.revealed = [set() for _ in self.chain]

    def reveal_all_occurrences(self, letter):
        added = 0
        for wi, w in enumerate(self.chain):
            for li, ch in enumerate(w):
                if ch == letter and li not in self.revealed[wi]:
                    self.revealed[wi].add(li)
                    added += 1
        return added

    def hidden_cells(self):
        return [(wi, li)
                for wi, w in enumerate(self.chain)
                for li in range(len(w))
                if li not in self.revealed[wi]]

    def hidden_counts(self):
        counts = defaultdict(int)
        for wi, li in self.hidden_cells():
            counts[self.chain[wi][li]] += 1
        return dict(counts)

    def hidden_count(self):
        return sum(len(w) - len(r) for w, r in zip(self.chain, self.revealed))

    def visible_letters(self):
        return {self.chain[wi][li] for wi, r in enumerate(self.revealed) for li in r}

    def is_revealed_anywhere(self, letter):
        return any(self.chain[wi][li] == letter
                   for wi, r in enumerate(self.revealed) for li in r)

    def pick_random_hidden_cell(self, rng=None):
        cells = self.hidden_cells()
        if not cells:
            return None
        return (rng or random).choice(cells)

    def is_solved(self):
        return self.hidden_count() == 0

    def masked_words(self, mask="_"):
        return ["".join(ch if li in self.revealed[wi] else mask for li, ch in enumerate(w))
                for wi, w in enumerate(self.chain)]

    def letter_frequencies(self):
        freq = defaultdict(int)
        for w in self.chain:
            for ch in w:
                freq[ch] += 1
        return dict(freq)

# --------------------------- Layout -------------------------------------------

EdgeRoute = namedtuple('EdgeRoute', 'kind offset_y above lane')
LegendItem = namedtuple('LegendItem', 'letter cx cy remaining')
Frame = namedtuple('Frame', 'size order positions slots edges routes center_y '
                            'legend legend_box buttons hover_node')

def center_y_for(height):
    # sits a little below the middle to leave room for the word header
    return math.floor(height / 2 + 20)

def compute_node_positions(order, width, height):
    """Return ({letter: (x, y)}, {letter: (row, col)}) for nodes in first-appearance order."""
    positions = {}
    slots = {}
    if not order:
        return positions, slots

    n = len(order)
    rows = 2 if n <= 18 else 3
    cols = max(1, math.ceil(n / rows))

    usable_w = max(MIN_USABLE_W, width - LEFT_MARGIN - RIGHT_MARGIN)
    if cols > 1:
        step = usable_w / (cols - 1)
        x0 = LEFT_MARGIN
    else:
        step = 0.0
        x0 = LEFT_MARGIN + usable_w / 2

    cy = center_y_for(height)
    row_ys = [cy - 70, cy + 70] if rows == 2 else [cy - 90, cy, cy + 90]

    for idx, ch in enumerate(order):
        r = idx % rows
        c = idx // rows
        positions[ch] = (float(x0 + c * step), float(row_ys[r]))
        slots[ch] = (r, c)
    return positions, slots

def compute_edge_routing(edges, positions, slots, center_y):
    """
    One EdgeRoute per edge, in edge order.

    Neighbours in a row get a straight arrow, double letters a loop, and everything
    else a curve bulging away from the centre line. Curves spanning the same columns
    and rows on the same side share a lane key; each repeat moves one lane further out.
    """
    routes = []
    lane_counts = defaultdict(int)

    for e in edges:
        if e.a not in positions or e.b not in positions or e.a not in slots or e.b not in slots:
            routes.append(EdgeRoute('skip', 0.0, False, 0))
            continue
        pa = positions[e.a]
        pb = positions[e.b]

        if e.a == e.b:
            routes.append(EdgeRoute('loop', 0.0, pa[1] <= center_y, 0))
            continue

        ra, ca = slots[e.a]
        rb, cb = slots[e.b]
        if ra == rb and abs(ca - cb) == 1:
            routes.append(EdgeRoute('straight', 0.0, False, 0))
            continue

        mid_y = (pa[1] + pb[1]) / 2
        outward = -1 if mid_y <= center_y else 1

        base = 50 + 18 * min(6, abs(ca - cb))
        if ra != rb:
            base += 25

        key = (min(ca, cb), max(ca, cb), outward, min(ra, rb), max(ra, rb))
        lane = lane_counts[key]
        lane_counts[key] += 1

        boost = min(lane, MAX_LANE_BOOST)
        offset_y = outward * (base + boost * LANE_SPACING)
        routes.append(EdgeRoute('curve', float(offset_y), False, lane))
    return routes

def build_legend(hidden_counts, width):
    """Legend tokens for letters still hidden, alphabetical, in columns of eight."""
    remaining = sorted((letter, n) for letter, n in hidden_counts.items() if n > 0)

    row_h, pad = 32, 12
    col_gap, col_w = 20, 90
    n_items = len(remaining)
    n_cols = max(1, math.ceil(n_items / LEGEND_ROWS_PER_COL))
    rows_per_col = LEGEND_ROWS_PER_COL if n_cols > 1 else n_items

    if n_cols > 1:
        box_w = col_w * n_cols + col_gap * (n_cols - 1) + pad * 2
    else:
        box_w = col_w + pad * 2 + 50
    box_h = pad + row_h * rows_per_col + pad

    legend_x = min(width - 250, width - box_w - 10)
    legend_y = 110

    items = []
    for idx, (letter, n) in enumerate(remaining):
        col, row = divmod(idx, LEGEND_ROWS_PER_COL)
        x0 = legend_x + pad + col * (col_w + col_gap)
        y0 = legend_y + pad + row * row_h
        items.append(LegendItem(letter, x0 + LEGEND_NODE_R, y0 + LEGEND_NODE_R, n))
    return items, (legend_x, legend_y, box_w, box_h)

def layout_buttons(width, height):
    bw, bh, spacing = 130, 40, 14
    total = len(ACTIONS) * bw + (len(ACTIONS) - 1) * spacing
    x0 = (width - total) // 2
    y = height - 70
    return [Button((x0 + i * (bw + spacing), y, bw, bh), label, action)
            for i, (label, action) in enumerate(ACTIONS)]

def hit_node_at(positions, pos):
    for ch, p in positions.items():
        if point_in_circle(pos, p, NODE_R):
            return ch
    return None

def hit_legend_at(items, pos):
    for item in items:
        if point_in_circle(pos, (item.cx, item.cy), LEGEND_NODE_R):
            return item.letter
    return None

def build_frame(game, size, pointer):
    """Everything the renderer and the hit tests need for one tick."""
    w, h = size
    cy = center_y_for(h)
    positions, slots = compute_node_positions(game.order, w, h)
    routes = compute_edge_routing(game.edges, positions, slots, cy)
    legend, legend_box = build_legend(game.tracker.hidden_counts(), w)
    return Frame(size=(w, h), order=game.order, positions=positions, slots=slots,
                 edges=game.edges, routes=routes, center_y=cy,
                 legend=legend, legend_box=legend_box,
                 buttons=layout_buttons(w, h),
                 hover_node=hit_node_at(positions, pointer))

# --------------------------- Curve geometry -----------------------------------

StraightArrow = namedtuple('StraightArrow', 'start shaft_end tip angle')
CurvedArrow = namedtuple('CurvedArrow', 'points tip angle t_tip')
LoopArrow = namedtuple('LoopArrow', 'points tip angle')

def quad_point(p0, p1, p2, t):
    p0, p1, p2 = (np.asarray(p, float) for p in (p0, p1, p2))
    u = 1.0 - t
    return u * u * p0 + 2.0 * u * t * p1 + t * t * p2

def quad_deriv(p0, p1, p2, t):
    p0, p1, p2 = (np.asarray(p, float) for p in (p0, p1, p2))
    return 2.0 * (1.0 - t) * (p1 - p0) + 2.0 * t * (p2 - p1)

def clip_quad_to_circle(p0, p1, p2, center, radius,
                        scan_steps=CLIP_SCAN_STEPS, bisect_steps=CLIP_BISECT_STEPS):
    """
    Largest t at which the curve leaves the circle around `center`, walking back from
    t=1. A coarse scan finds the first sample outside the circle, then bisection pins
    the crossing down. Returns None if no sample is outside (curve too short).
    """
    C = np.asarray(center, float)

    def outside(t):
        return float(np.linalg.norm(quad_point(p0, p1, p2, t) - C)) >= radius

    t_hi = 1.0
    t_lo = None
    for i in range(1, scan_steps + 1):
        t = 1.0 - i / scan_steps
        if outside(t):
            t_lo = t
            break
    if t_lo is None:
        return None

    for _ in range(bisect_steps):
        tm = 0.5 * (t_lo + t_hi)
        if outside(tm):
            t_lo = tm
        else:
            t_hi = tm
    return t_lo

def arrowhead_points(tip, angle, head_len, head_w):
    tx, ty = tip
    c, s = math.cos(angle), math.sin(angle)
    left = (tx - head_len * c + head_w * s, ty - head_len * s - head_w * c)
    right = (tx - head_len * c - head_w * s, ty - head_len * s + head_w * c)
    return [(float(tx), float(ty)), left, right]

def straight_arrow(pa, pb, radius=NODE_R, head_len=STRAIGHT_HEAD[0]):
    """Shaft between the two node circles; the head covers the last `head_len` pixels."""
    pa = np.asarray(pa, float)
    pb = np.asarray(pb, float)
    d = pb - pa
    dist = float(np.linalg.norm(d))
    if dist < 1e-3:
        return None
    u = d / dist
    start = pa + u * radius
    tip = pb - u * radius
    shaft_end = tip - u * head_len
    return StraightArrow(tuple(start), tuple(shaft_end), tuple(tip),
                         math.atan2(d[1], d[0]))

def curved_arrow(pa, pb, offset_y, radius=NODE_R, samples=CURVE_SAMPLES, head_w=CURVE_HEAD[1]):
    pa = np.asarray(pa, float)
    pb = np.asarray(pb, float)
    d = pb - pa
    dist = float(np.linalg.norm(d))
    if dist < 1e-3:
        return None

    p0 = pa + d / dist * radius
    p2 = pb
    p1 = 0.5 * (p0 + p2) + np.array([0.0, offset_y])

    t_tip = clip_quad_to_circle(p0, p1, p2, p2, radius)
    if t_tip is None:
        return None

    # upward arrows shift down by a quarter head width
    nudge = np.array([0.0, head_w / 4 if pa[1] > pb[1] else 0.0])
    points = [tuple(quad_point(p0, p1, p2, t) + nudge)
              for t in np.linspace(0.0, t_tip, samples + 1)]
    tip = tuple(quad_point(p0, p1, p2, t_tip) + nudge)
    v = quad_deriv(p0, p1, p2, t_tip)
    return CurvedArrow(points, tip, math.atan2(v[1], v[0]), t_tip)

def loop_arrow(p, above, radius=NODE_R, samples=LOOP_SAMPLES):
    """Teardrop over (or under) a node, for double letters."""
    x, y = p
    sign = -1.0 if above else 1.0
    start = (x - radius * 0.6, y + sign * radius * 0.9)
    end = (x + radius * 0.6, y + sign * radius * 0.9)
    ctrl = (x, y + sign * radius * 2.2)
    points = [tuple(quad_point(start, ctrl, end, t)) for t in np.linspace(0.0, 1.0, samples + 1)]
    prev = ((end[0] + ctrl[0]) / 2, (end[1] + ctrl[1]) / 2)
    angle = math.atan2(end[1] - prev[1], end[0] - prev[0])
    return LoopArrow(points, end, angle)

# -------------------------- Core game model ------------------------------------

class WordChainGame:
    """One puzzle: the chain, what's revealed, counters and the clock."""

    def __init__(self, chain, clock=time.monotonic):
        if not is_valid_chain(chain):
            raise ValueError(f"Not a valid word chain: {chain!r}")
        self.chain = list(chain)
        self.tracker = RevealTracker(self.chain)
        self.order, self.edges = derive_graph(self.chain)
        self.error_count = 0
        self.hint_count = 0
        self.solved = False
        self.show_words = False
        self._clock = clock
        self.start_time = clock()
        self.solved_elapsed = None

    @classmethod
    def new(cls, pool, chain_len=DEFAULT_CHAIN_LEN, rng=None, clock=time.monotonic):
        chain = generate_chain(pool, chain_len, rng=rng)
        logger.info(f"New puzzle: {len(chain)} words, {len(set(letter_sequence(chain)))} letters")
        logger.debug(f"Chain: {' -> '.join(chain)}")
        return cls(chain, clock=clock)

    @property
    def first_letter(self):
        return self.chain[0][0]

    @property
    def last_letter(self):
        return self.chain[-1][-1]

    def elapsed(self):
        if self.solved_elapsed is not None:
            return self.solved_elapsed
        return self._clock() - self.start_time

    def _check_solved(self):
        if not self.solved and self.tracker.is_solved():
            self.solved = True
            self.solved_elapsed = self._clock() - self.start_time
            self.show_words = True
            logger.info(f"Solved in {format_elapsed(self.solved_elapsed)} "
                        f"with {self.error_count} error(s), {self.hint_count} hint(s)")
        return self.solved

    def guess(self, letter, target):
        """Drop `letter` on the node for `target`. Returns True when they match."""
        if letter == target:
            self.tracker.reveal_all_occurrences(letter)
            self._check_solved()
            return True
        # no penalty for missing a letter the player can already see somewhere
        if not self.tracker.is_revealed_anywhere(target):
            self.error_count += 1
        return False

    def can_hint(self):
        return not self.solved and not self.show_words and self.tracker.hidden_count() > 0

    def hint(self, rng=None):
        """Reveal the letter of a random hidden cell; returns that letter or None."""
        if not self.can_hint():
            return None
        wi, li = self.tracker.pick_random_hidden_cell(rng)
        letter = self.chain[wi][li]
        self.tracker.reveal_all_occurrences(letter)
        self.hint_count += 1
        self._check_solved()
        return letter

    def reveal(self):
        self.show_words = True

# ------------------------------ Controller -------------------------------------

class InteractionController:
    """Turns pointer events and button actions into game transitions."""

    IDLE = 'idle'
    DRAGGING = 'dragging'
    SOLVED = 'solved'

    def __init__(self, game, new_game=None, size=(WINDOW_W, WINDOW_H), rng=None):
        self.game = game
        self.new_game = new_game
        self.rng = rng
        self.state = self.SOLVED if game.solved else self.IDLE
        self.dragged_letter = None
        self.pointer = (0, 0)
        self.show_howto = False
        self.running = True
        self.toast = None
        self.toast_ms = 0
        self.frame = build_frame(self.game, size, self.pointer)

    def refresh(self, size):
        self.frame = build_frame(self.game, size, self.pointer)
        return self.frame

    def tick(self, dt_ms, size):
        if self.toast_ms > 0:
            self.toast_ms -= dt_ms
            if self.toast_ms <= 0:
                self.toast = None
        return self.refresh(size)

    def dispatch(self, kind, pos=None, action=None):
        if pos is not None:
            self.pointer = (pos[0], pos[1])
        if kind == 'down':
            self._pointer_down()
        elif kind == 'move':
            pass
        elif kind == 'up':
            self._pointer_up()
        elif kind == 'action':
            self._run_action(action)
        else:
            raise ValueError(f"Unknown event kind: {kind!r}")

    def _pointer_down(self):
        if self.show_howto:
            self.show_howto = False
            return
        for btn in self.frame.buttons:
            if btn.contains(self.pointer):
                self._run_action(btn.action)
                return
        if self.state != self.IDLE or self.game.solved:
            return
        letter = hit_legend_at(self.frame.legend, self.pointer)
        if letter is not None:
            self.state = self.DRAGGING
            self.dragged_letter = letter

    def _pointer_up(self):
        if self.state != self.DRAGGING:
            return
        letter = self.dragged_letter
        self.dragged_letter = None
        self.state = self.IDLE

        node = hit_node_at(self.frame.positions, self.pointer)
        if node is not None and not self.game.show_words and not self.game.solved:
            self.game.guess(letter, node)
            self.refresh(self.frame.size)
        if self.game.solved:
            self.state = self.SOLVED

    def _run_action(self, action):
        if action == 'hint':
            if self.game.hint(self.rng) is not None:
                if self.game.solved:
                    self._end_drag(self.SOLVED)
                self.refresh(self.frame.size)
        elif action == 'reveal':
            self.game.reveal()
            if self.state == self.DRAGGING:
                self._end_drag(self.IDLE)
            self.refresh(self.frame.size)
        elif action == 'howto':
            self.show_howto = True
        elif action == 'next':
            self._next_puzzle()
        elif action == 'quit':
            self.running = False
        else:
            raise ValueError(f"Unknown action: {action!r}")

    def _end_drag(self, state):
        self.dragged_letter = None
        self.state = state

    def _next_puzzle(self):
        if self.new_game is None:
            return
        try:
            game = self.new_game()
        except GenerationFailure as e:
            logger.error(f"New puzzle failed: {e}")
            self.toast = str(e)
            self.toast_ms = TOAST_MS
            return
        self.game = game
        self._end_drag(self.IDLE)
        self.show_howto = False
        self.toast = None
        self.refresh(self.frame.size)

# ------------------------------- UI helpers ------------------------------------

class Button:
    def __init__(self, rect, label, action=None):
        self.rect = pygame.Rect(rect)
        self.label = label
        self.action = action
        self.hover = False

    def draw(self, surf, font):
        bg = BTN_BG_HOVER if self.hover else BTN_BG
        pygame.draw.rect(surf, bg, self.rect, border_radius=8)
        pygame.draw.rect(surf, BTN_BORDER, self.rect, width=2, border_radius=8)
        txt = font.render(self.label, True, BTN_TEXT)
        tr = txt.get_rect(center=self.rect.center)
        surf.blit(txt, tr)

    def contains(self, pos):
        return self.rect.collidepoint(int(pos[0]), int(pos[1]))

# ------------------------------- Renderer --------------------------------------

class PygameRenderer:
    def __init__(self, screen):
        self.screen = screen
        self.header = pygame.font.SysFont("Arial", 28, bold=True)
        self.node_font = pygame.font.SysFont("Arial", 26, bold=True)
        self.token_font = pygame.font.SysFont("Arial", 18, bold=True)
        self.font = pygame.font.SysFont("Arial", 16)
        self.bold = pygame.font.SysFont("Arial", 16, bold=True)
        self.banner = pygame.font.SysFont("Arial", 34, bold=True)

    def _text(self, font, text, color, **anchor):
        txt = font.render(text, True, color)
        self.screen.blit(txt, txt.get_rect(**anchor))

    def draw(self, ctl):
        game, frame = ctl.game, ctl.frame
        w, h = self.screen.get_size()
        self.screen.fill(WHITE)

        self._text(self.token_font, f"Time: {format_elapsed(game.elapsed())}", BLACK, topleft=(14, 10))

        header_bottom, layouts = self._draw_header(game)
        if frame.hover_node is not None:
            self._draw_slot_highlights(game, layouts, frame.hover_node)

        self._draw_edges(frame)
        self._draw_nodes(game, frame)

        if frame.hover_node is not None:
            freq = game.tracker.letter_frequencies().get(frame.hover_node, 0)
            self._draw_tooltip(f"used: {freq}", frame.positions[frame.hover_node])

        self._draw_legend(frame)

        if ctl.state == ctl.DRAGGING and ctl.dragged_letter:
            self._draw_token(ctl.pointer, ctl.dragged_letter)

        if game.solved:
            self._draw_banner(game, header_bottom)

        for btn in frame.buttons:
            btn.hover = btn.contains(ctl.pointer)
            btn.draw(self.screen, self.bold)

        if ctl.toast:
            self._text(self.bold, ctl.toast, TOAST_COLOR, bottomleft=(16, h - 80))

        if ctl.show_howto:
            self._draw_howto()

    # --- header
    def _draw_header(self, game):
        words = game.chain if game.show_words else game.tracker.masked_words()
        font = self.header
        arrow = " → "
        widths = [font.size(wd)[0] for wd in words]
        arrow_w = font.size(arrow)[0]
        total = sum(widths) + arrow_w * (len(words) - 1)
        x = self.screen.get_width() / 2 - total / 2
        top = 8

        layouts = []
        for wi, shown in enumerate(words):
            self.screen.blit(font.render(shown, True, BLACK), (int(x), top))
            boxes = [(x + font.size(shown[:i])[0], max(1, font.size(shown[i])[0]))
                     for i in range(len(shown))]
            layouts.append((wi, x, widths[wi], boxes))
            x += widths[wi]
            if wi < len(words) - 1:
                self.screen.blit(font.render(arrow, True, BLACK), (int(x), top))
                x += arrow_w

        sw_w, sw_h = 26, 10
        sw_y = top + font.get_height() + 4
        for wi, wx, ww, _ in layouts:
            r = pygame.Rect(int(wx + ww / 2 - sw_w / 2), sw_y, sw_w, sw_h)
            pygame.draw.rect(self.screen, WORD_EDGE_COLORS[wi % len(WORD_EDGE_COLORS)], r, border_radius=3)
            pygame.draw.rect(self.screen, BLACK, r, width=1, border_radius=3)
        return sw_y + sw_h, layouts

    def _draw_slot_highlights(self, game, layouts, letter):
        box_h = self.header.get_height() + 2
        for wi, _, _, boxes in layouts:
            color = WORD_EDGE_COLORS[wi % len(WORD_EDGE_COLORS)]
            for li, ch in enumerate(game.chain[wi]):
                if ch != letter or li >= len(boxes):
                    continue
                bx, bw = boxes[li]
                r = pygame.Rect(int(bx - 3), 7, int(bw + 6), box_h)
                pygame.draw.rect(self.screen, color, r, width=3, border_radius=6)

    # --- graph
    def _draw_edges(self, frame):
        overlay = pygame.Surface(self.screen.get_size(), pygame.SRCALPHA)
        hover = frame.hover_node
        for e, route in zip(frame.edges, frame.routes):
            if route.kind == 'skip':
                continue
            if hover is None:
                alpha = EDGE_ALPHA_IDLE
            elif hover in (e.a, e.b):
                alpha = EDGE_ALPHA_FOCUS
            else:
                alpha = EDGE_ALPHA_DIM
            color = WORD_EDGE_COLORS[e.wi % len(WORD_EDGE_COLORS)] + (int(round(255 * alpha)),)

            pa = frame.positions[e.a]
            pb = frame.positions[e.b]
            if route.kind == 'loop':
                arrow = loop_arrow(pa, route.above)
                pygame.draw.lines(overlay, color, False, arrow.points, width=EDGE_W)
                head = LOOP_HEAD
            elif route.kind == 'straight':
                arrow = straight_arrow(pa, pb)
                if arrow is None:
                    continue
                pygame.draw.line(overlay, color, arrow.start, arrow.shaft_end, width=EDGE_W)
                head = STRAIGHT_HEAD
            else:
                arrow = curved_arrow(pa, pb, route.offset_y)
                if arrow is None:
                    continue
                pygame.draw.lines(overlay, color, False, arrow.points, width=EDGE_W)
                head = CURVE_HEAD
            pygame.draw.polygon(overlay, color, arrowhead_points(arrow.tip, arrow.angle, *head))
        self.screen.blit(overlay, (0, 0))

    def _draw_nodes(self, game, frame):
        if game.show_words:
            visible = set(letter_sequence(game.chain))
        else:
            visible = game.tracker.visible_letters()
        for ch in frame.order:
            x, y = frame.positions[ch]
            center = (int(round(x)), int(round(y)))
            if ch == game.first_letter:
                fill = START_COLOR
            elif ch == game.last_letter:
                fill = END_COLOR
            else:
                fill = NODE_COLOR
            if frame.hover_node == ch:
                pygame.draw.circle(self.screen, HOVER_RING, center, NODE_R + 6, width=2)
            pygame.draw.circle(self.screen, fill, center, NODE_R)
            pygame.draw.circle(self.screen, BLACK, center, NODE_R, width=2)
            if ch in visible:
                self._text(self.node_font, ch.upper(), WHITE, center=center)

    def _draw_tooltip(self, text, node_pos):
        w, h = self.screen.get_size()
        txt = self.font.render(text, True, BLACK)
        bw = txt.get_width() + 20
        bh = txt.get_height() + 12
        tx = min(max(10, node_pos[0] - bw / 2), w - bw - 10)
        ty = min(max(10, node_pos[1] - NODE_R - bh - 10), h - bh - 10)
        r = pygame.Rect(int(tx), int(ty), bw, bh)
        pygame.draw.rect(self.screen, TOOLTIP_BG, r, border_radius=8)
        pygame.draw.rect(self.screen, TOOLTIP_BORDER, r, width=2, border_radius=8)
        self.screen.blit(txt, txt.get_rect(center=r.center))

    # --- legend
    def _draw_token(self, pos, letter):
        center = (int(round(pos[0])), int(round(pos[1])))
        pygame.draw.circle(self.screen, NODE_COLOR, center, LEGEND_NODE_R)
        pygame.draw.circle(self.screen, BLACK, center, LEGEND_NODE_R, width=2)
        self._text(self.token_font, letter.upper(), WHITE, center=center)

    def _draw_legend(self, frame):
        if not frame.legend:
            return
        lx, ly, lw, lh = frame.legend_box
        r = pygame.Rect(int(lx), int(ly), int(lw), int(lh))
        pygame.draw.rect(self.screen, LEGEND_BG, r, border_radius=10)
        pygame.draw.rect(self.screen, LEGEND_BORDER, r, width=2, border_radius=10)
        for item in frame.legend:
            self._draw_token((item.cx, item.cy), item.letter)
            self._text(self.font, f"({item.remaining})", BLACK,
                       midleft=(int(item.cx + LEGEND_NODE_R + 8), int(item.cy)))

    # --- overlays
    def _draw_banner(self, game, header_bottom):
        w, _ = self.screen.get_size()
        msg = f"You solved it!  Errors: {game.error_count}  Time: {format_elapsed(game.elapsed())}"
        txt = self.banner.render(msg, True, BANNER_FG)
        bw = txt.get_width() + 36
        bh = txt.get_height() + 20
        cy = max(105, header_bottom + 35)
        r = pygame.Rect(int(w / 2 - bw / 2), int(cy - bh / 2), bw, bh)
        pygame.draw.rect(self.screen, BANNER_BG, r, border_radius=10)
        pygame.draw.rect(self.screen, BANNER_FG, r, width=3, border_radius=10)
        self.screen.blit(txt, txt.get_rect(center=r.center))

    def _draw_howto(self):
        w, h = self.screen.get_size()
        shade = pygame.Surface((w, h), pygame.SRCALPHA)
        shade.fill(OVERLAY_SHADE)
        self.screen.blit(shade, (0, 0))

        line_h = self.font.get_height() + 6
        pw = 560
        ph = line_h * len(HOWTO_LINES) + 40
        panel = pygame.Rect(int(w / 2 - pw / 2), int(h / 2 - ph / 2), pw, ph)
        pygame.draw.rect(self.screen, WHITE, panel, border_radius=12)
        pygame.draw.rect(self.screen, BTN_BORDER, panel, width=2, border_radius=12)
        y = panel.top + 20
        for i, line in enumerate(HOWTO_LINES):
            font = self.bold if i == 0 else self.font
            self._text(font, line, BLACK, midtop=(panel.centerx, y))
            y += line_h

# --------------------------------- App -----------------------------------------

KEY_ACTIONS = {
    pygame.K_h: 'hint',
    pygame.K_r: 'reveal',
    pygame.K_n: 'next',
    pygame.K_ESCAPE: 'quit',
}

class App:
    def __init__(self, words, chain_len=DEFAULT_CHAIN_LEN, seed=None):
        self.words = words
        self.chain_len = chain_len
        self.seed = set_seed(seed)
        logger.info(f"Seed: {self.seed}")
        game = self.new_game()   # fail before opening a window

        pygame.init()
        pygame.display.set_caption("Word Chain")
        self.screen = pygame.display.set_mode((WINDOW_W, WINDOW_H), pygame.RESIZABLE)
        self.clock = pygame.time.Clock()
        self.controller = InteractionController(game, new_game=self.new_game,
                                                size=self.screen.get_size())
        self.renderer = PygameRenderer(self.screen)

    def new_game(self):
        return WordChainGame.new(self.words, self.chain_len)

    def handle_event(self, event):
        ctl = self.controller
        if event.type == pygame.QUIT:
            ctl.dispatch('action', action='quit')
        elif event.type == pygame.KEYDOWN:
            action = KEY_ACTIONS.get(event.key)
            if action is not None:
                ctl.dispatch('action', action=action)
        elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
            ctl.dispatch('down', event.pos)
        elif event.type == pygame.MOUSEMOTION:
            ctl.dispatch('move', event.pos)
        elif event.type == pygame.MOUSEBUTTONUP and event.button == 1:
            ctl.dispatch('up', event.pos)
        elif event.type == pygame.VIDEORESIZE:
            self.screen = pygame.display.set_mode((event.w, event.h), pygame.RESIZABLE)
            self.renderer.screen = self.screen

    async def run(self):
        while self.controller.running:
            dt = self.clock.tick(FPS)
            for event in pygame.event.get():
                self.handle_event(event)
            self.controller.tick(dt, self.screen.get_size())
            self.renderer.draw(self.controller)
            pygame.display.flip()

            await asyncio.sleep(0)
        pygame.quit()

# --------------------------------- Main ----------------------------------------

def chain_length(value):
    n = int(value)
    if not MIN_CHAIN_LEN <= n <= MAX_CHAIN_LEN:
        raise argparse.ArgumentTypeError(
            f"chain length must be between {MIN_CHAIN_LEN} and {MAX_CHAIN_LEN}")
    return n

def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Word chain letter-graph puzzle.")
    parser.add_argument("--length", type=chain_length, default=DEFAULT_CHAIN_LEN,
                        help="words per chain (2-5)")
    parser.add_argument("--seed", type=int, default=None, help="random seed")
    parser.add_argument("--words", type=Path, default=WORD_FILE,
                        help="word list, one word per line")
    parser.add_argument("--verbose", "-v", action="store_true", help="debug logging")
    return parser.parse_args(argv)

def main(argv=None):
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    words = load_words(args.words, chain_len=args.length)
    try:
        app = App(words, chain_len=args.length, seed=args.seed)
    except GenerationFailure as e:
        logger.error(str(e))
        return 1
    asyncio.run(app.run())
    return 0

if __name__ == "__main__":
    sys.exit(main())
