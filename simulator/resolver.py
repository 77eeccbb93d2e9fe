import logging

import numpy as np

logger = logging.getLogger(__name__)

HALT_ROW = (-1, 0, -1)


class TransitionResolver:
    """O(1) (state, symbol) -> rule index for one machine definition.

    The first rule defined for a key wins; later ones are dead and only
    reported.
    """

    def __init__(self, definition):
        self.definition = definition
        self._index = {}
        self._states = {state.name: state for state in definition.states}
        self.dead_rules = []
        for rule in definition.transitions:
            if rule.key in self._index:
                self.dead_rules.append(rule)
                continue
            self._index[rule.key] = rule

        for rule in self.dead_rules:
            logger.warning(
                "Dead rule in %r: (%s, %s) is already handled by an earlier rule",
                definition.name, rule.current_state, rule.read_symbol,
            )

    def lookup(self, state, symbol):
        return self._index.get((state, symbol))

    def state(self, name):
        return self._states.get(name)

    def __len__(self):
        return len(self._index)

    def to_array(self):
        """Dense table, one row per (state, symbol) in sorted symbol order.

        Rows are ``(write_index, move, next_index)`` with ``(-1, 0, -1)``
        where no rule applies. Row index is ``state * num_symbols + symbol``.
        """
        states = self.definition.state_names
        symbols = sorted(self.definition.tape_alphabet)
        state_ids = {name: i for i, name in enumerate(states)}
        symbol_ids = {symbol: i for i, symbol in enumerate(symbols)}

        table = np.full((len(states) * len(symbols), 3), HALT_ROW, dtype=np.int32)
        for (state, symbol), rule in self._index.items():
            row = state_ids[state] * len(symbols) + symbol_ids[symbol]
            table[row] = (symbol_ids[rule.write_symbol], int(rule.move), state_ids[rule.next_state])
        return table
