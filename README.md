# budsim

This package models a triangulated membrane of the kind used to study cell
budding. It computes the forces and energies on the mesh nodes, reads mesh
schemes from XML, and writes snapshots that a viewer can open.

## Modules

- `budsim.geometry` has small 3-vector helpers (`add`, `subtract`, `scale`,
  `dot`, `cross`, `norm`). It also has `triangle_area`, `area_energy` and
  `bud_area`. `bud_area` counts only triangles in the upper hemisphere whose
  nodes are all present.
- `budsim.springs` has three parts:
  - `linear_spring` gives a Hookean edge spring and returns a
    `LinearSpringResult`.
  - `lj_spring` gives the Lennard-Jones interaction between a node and the LJ
    particle and returns an `LJResult`.
  - `advance_position` and `advance_positions` make the explicit update
    `x + dt/mass * f`.
- `budsim.area` has `AreaSpringParams`, `area_spring_constant`, `area_spring`
  and `compute_area_springs`. These are area springs whose stiffness can be
  weakened per triangle. The rule is chosen by `scale_type`, from 0 to 4:
  Gaussian, power law, linear, by region, or Hill function.
- `budsim.bending` has `BendingParams`, `bending_spring_constant`,
  `bending_spring` and `compute_bending_springs`. The bending energy of each
  pair of triangles that share an edge is `k * (1 - cos(theta - theta0))`.
  Boundary edges contribute nothing.
- `budsim.bending_terms` holds the derivative terms that the bending forces
  use.
- `budsim.buckets` has three parts:
  - `BucketIndexer` maps a position to a grid bucket.
  - `neighbor_bucket` gives the 27 periodic neighbours of a bucket.
  - `expand` repeats each value by a count.
- `budsim.model` has `SystemBuilder`, which gathers nodes, edges, triangles,
  connectivity tables, fixed nodes and default constants in a `HostMesh`.
  Its `create_system()` returns a `MembraneSystem`.
- `budsim.storage` has `Storage`, which keeps a weak reference to a system and
  writes into a directory:
  - On creation it writes `Temp.sta` with the node, edge and element counts.
  - `print_vtk_file()` writes numbered VTK frames of the edges, the node
    positions and the edge strains.
  - `store_variables()` writes numbered `.sta` files of the nodes and of all
    connectivity tables, with ids 1-based.
  - `frame_number` gives the zero-padded frame label.
- `budsim.cli` has `load_scheme`, `parse_arguments`,
  `generate_output_file_name` and `main`.

## Installing

```
pip install .
```

## The scheme file

A scheme is an XML document whose root element is `data`. It can hold these
sections:

- `settings`: the tags `Tau`, `KBT`, `Linear_Const`, `Area_Const`,
  `Bend_Const`, `LJ_Eps`, `LJ_Rmin`, `LJ_Rmax`, `LJ_Const`, `LJ_X`, `LJ_Y` and
  `LJ_Z`.
- `nodes/node`: three coordinates each.
- `edgeinfos/edgeinfo`: two node ids each.
- `elems/elem`: three node ids each.
- `elem2edges/elem2edge`: three edge ids each.
- `nndatas/nndata`: nine node ids each.
- `edge2elems/edge2elem`: two triangle ids each.
- `capsidnodes/capsidnode`: three coordinates each.
- `fixed/fix`: one node id each.

Ids in the file start at 1. Every edge gets the builder's default rest length
of 1.0.

## Running

```
budsim -dt=0.001 -solve_time=10000 scheme.xml
```

The last argument is the scheme file. `-dt` sets the time step, with a
default of 0.001. `-solve_time` sets the solve time, with a default of 10000.

The command does the following:

1. It loads the scheme.
2. It attaches a `Storage` in the current directory.
3. It writes the first VTK frame, under
   `Animation_realistic/Simulations_with_flat_sheet_tests/`.
4. It writes the first state file, under `Variables_realistic/`.
5. It prints the elapsed time.

It exits with 2 if the scheme file argument is missing, and with 1 if the
scheme cannot be read.

## Using it from Python

```python
from budsim.model import SystemBuilder
from budsim.cli import load_scheme
from budsim.storage import Storage

builder = SystemBuilder(0.001, 10000)
system = load_scheme("scheme.xml", builder)
storage = Storage(system, directory="out")
storage.print_vtk_file()
```

If the scheme cannot be parsed or an entry is malformed, `load_scheme` raises
`budsim.cli.SchemeError`.

## What it does not do

There is no time-stepping loop. `MembraneSystem` holds the state and the
constants but has no solve method. Neither the command nor the builder runs
the simulation forward.

The force functions (`linear_spring`, `lj_spring`, `compute_area_springs`,
`compute_bending_springs`) and `advance_positions` are separate building
blocks. To step the mesh, call them yourself.

The LJ particle is not moved, and there is no GPU code.