"""Report domain: session FSM, scope resolution, assembly."""
