"""Planar straight-line graph (PSLG) utilities.

Builds a noded PSLG from boundary rings, finds connected components,
recovers the partition enclosing a seed point by breadth-first search, and
orders edge loops into polylines.
"""

import numpy as np
import shapely.geometry
import shapely.ops
from collections import deque
from dataclasses import dataclass
from scipy.sparse import csr_matrix
from scipy.sparse.csgraph import connected_components as scipy_cc
from shapely.geometry.polygon import orient

from .rings import RingCollection, as_collection, signed_area


@dataclass
class PSLG:
    """Noded planar straight-line graph.

    Attributes:
        nodes: Node coordinates, shape (n_nodes, 2).
        edges: Node index pairs, shape (n_edges, 2). No two edges cross
               except at a shared node.
    """
    nodes: np.ndarray
    edges: np.ndarray


@dataclass
class ConnectivityPartition:
    """One connected component of a PSLG reached from a seed edge."""
    nodes: np.ndarray
    edges: np.ndarray
    seed_edge: int


def build_pslg(rings, decimals=10):
    """Node the linework of ``rings`` into a PSLG.

    Crossing segments are split at their intersections (shapely
    ``unary_union``) and coincident nodes merged after rounding to
    ``decimals``.
    """
    lines = [shapely.geometry.LineString(r)
             for r in as_collection(rings) if len(r) >= 2]
    if not lines:
        return PSLG(np.empty((0, 2)), np.empty((0, 2), dtype=int))

    noded = shapely.ops.unary_union(lines)
    parts = noded.geoms if hasattr(noded, 'geoms') else [noded]
    segs = []
    for part in parts:
        c = np.asarray(part.coords)[:, :2]
        if len(c) >= 2:
            segs.append(np.stack((c[:-1], c[1:]), axis=1))
    pts = np.round(np.concatenate(segs).reshape(-1, 2), decimals)

    nodes, inverse = np.unique(pts, axis=0, return_inverse=True)
    edges = np.asarray(inverse).reshape(-1, 2)
    edges = edges[edges[:, 0] != edges[:, 1]]
    edges = np.unique(np.sort(edges, axis=1), axis=0)
    return PSLG(nodes=nodes, edges=edges)


def connected_components(edges, n_vertices):
    """Find connected components of an undirected graph.

    Args:
        edges: Array of shape (n_edges, 2), pairs of vertex indices.
        n_vertices: Total number of vertices.

    Returns:
        labels: Array of shape (n_vertices,), component label per vertex.
    """
    if len(edges) == 0:
        return np.arange(n_vertices)

    row = np.concatenate([edges[:, 0], edges[:, 1]])
    col = np.concatenate([edges[:, 1], edges[:, 0]])
    data = np.ones(len(row), dtype=np.int8)
    adj = csr_matrix((data, (row, col)), shape=(n_vertices, n_vertices))

    _, labels = scipy_cc(adj, directed=False)
    return labels


def _adjacency(edges, n_vertices):
    adj = [[] for _ in range(n_vertices)]
    for a, b in edges:
        adj[a].append(b)
        adj[b].append(a)
    return adj


def ray_hits(pslg, seed):
    """Edges crossed by a ray cast from ``seed`` in the +x direction.

    Returns:
        Edge indices ordered by distance from the seed.
    """
    p = pslg.nodes[pslg.edges[:, 0]]
    q = pslg.nodes[pslg.edges[:, 1]]
    sx, sy = seed
    crosses = (p[:, 1] > sy) != (q[:, 1] > sy)
    with np.errstate(divide='ignore', invalid='ignore'):
        xint = p[:, 0] + (sy - p[:, 1]) * (q[:, 0] - p[:, 0]) / (q[:, 1] - p[:, 1])
    idx = np.flatnonzero(crosses & (xint > sx))
    return idx[np.argsort(xint[idx], kind='stable')]


def bfs_partition(pslg, seed_edge):
    """Breadth-first search over node adjacency from one edge.

    Args:
        pslg: PSLG.
        seed_edge: Index of the edge to start from.

    Returns:
        ConnectivityPartition holding every node and edge reachable from
        ``seed_edge``.
    """
    n = len(pslg.nodes)
    adj = _adjacency(pslg.edges, n)
    visited = np.zeros(n, dtype=bool)

    queue = deque(int(v) for v in pslg.edges[seed_edge])
    visited[list(queue)] = True
    while queue:
        v = queue.popleft()
        for w in adj[v]:
            if not visited[w]:
                visited[w] = True
                queue.append(w)

    return ConnectivityPartition(
        nodes=np.flatnonzero(visited),
        edges=np.flatnonzero(visited[pslg.edges[:, 0]]),
        seed_edge=int(seed_edge),
    )


def partition_polygon(pslg, partition, seed):
    """Smallest face of a partition enclosing ``seed``.

    Returns:
        RingCollection with the clockwise exterior ring first, followed by
        any interior rings, or None when no face encloses the seed.
    """
    lines = [shapely.geometry.LineString(pslg.nodes[e])
             for e in pslg.edges[partition.edges]]
    point = shapely.geometry.Point(seed)
    faces = [f for f in shapely.ops.polygonize(lines) if f.contains(point)]
    if not faces:
        return None
    face = orient(min(faces, key=lambda f: f.area), sign=-1.0)
    rings = [np.asarray(face.exterior.coords)[:, :2]]
    rings += [np.asarray(r.coords)[:, :2] for r in face.interiors]
    return RingCollection(rings)


def seed_polygon(pslg, seed):
    """Find the face of ``pslg`` containing ``seed``.

    Components crossed by a +x ray from the seed are searched nearest
    first; the first one with a face around the seed wins.

    Returns:
        (partition, polygon): ConnectivityPartition and RingCollection.

    Raises:
        ValueError: if no component encloses the seed.
    """
    labels = connected_components(pslg.edges, len(pslg.nodes))
    tried = set()
    for e in ray_hits(pslg, seed):
        comp = labels[pslg.edges[e, 0]]
        if comp in tried:
            continue
        tried.add(comp)
        partition = bfs_partition(pslg, e)
        poly = partition_polygon(pslg, partition, seed)
        if poly is not None:
            return partition, poly
    raise ValueError(
        f"Seed {tuple(np.round(seed, 6))} is not enclosed by the boundary graph")


def walk_loops(nodes, edges, min_nodes=10):
    """Order the edges of each connected component into a polyline.

    Components are expected to be simple chains or loops, as produced by
    contour tracing. Closed loops are returned clockwise. Components with
    fewer than ``min_nodes`` nodes are dropped.

    Returns:
        List of (n, 2) arrays.
    """
    nodes = np.asarray(nodes, dtype=float)
    edges = np.asarray(edges, dtype=int).reshape(-1, 2)
    if len(edges) == 0:
        return []

    labels = connected_components(edges, len(nodes))
    adj = _adjacency(edges, len(nodes))
    used = set()
    loops = []
    for comp in np.unique(labels[edges[:, 0]]):
        members = np.flatnonzero(labels == comp)
        if len(members) < min_nodes:
            continue
        ends = [v for v in members if len(adj[v]) == 1]
        cur = ends[0] if ends else members[0]
        path = [cur]
        while True:
            nxt = next((w for w in adj[cur]
                        if (min(cur, w), max(cur, w)) not in used), None)
            if nxt is None:
                break
            used.add((min(cur, nxt), max(cur, nxt)))
            path.append(nxt)
            cur = nxt
        line = nodes[path]
        if path[0] == path[-1] and signed_area(line) > 0:
            line = line[::-1]
        loops.append(line)
    return loops
