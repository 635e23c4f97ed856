"""Handles interactive/command-line mode for simplecalc. Uses cmd as backend."""

import cmd


class Shell(cmd.Cmd):
    """Simple Calc shell. Every line, commands included, is handed to the session's token stream."""
    intro = "Welcome to Simple Calc.\nEnter 'help' to learn how to use this program.\n"
    prompt = "> "

    def __init__(self, sess, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.sess = sess

    def onecmd(self, line):
        """Bypasses cmd's do_* dispatch: 'help', 'symbols' and 'quit' are statements of the calculator's own grammar.
        Returns True (stopping cmdloop) once the session reads a quit command.
        """
        if line == "EOF":
            return self.do_EOF(line)
        elif not line.strip():
            return self.emptyline()
        return self.default(line)

    def default(self, line):
        """Evaluates every statement on line."""
        self.sess.feed(line)
        return not self.sess.run()

    def emptyline(self):
        """Do not repeat previous command on empty line."""
        return False

    def do_EOF(self, arg):
        """Exits interpreter."""
        print()
        return True
