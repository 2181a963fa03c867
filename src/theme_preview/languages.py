"""
Example languages rendered for every theme.

Each language pairs a grammar scope with a short, fixed source snippet that
exercises the usual highlighting categories (keywords, strings, comments,
numbers, functions, classes).  The registry order is the order of a theme's
``language_tokens`` and of the generated images.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Language:
    """Static description of one example language."""

    name: str
    ext_name: str
    scope_name: str
    grammar: str  # Pygments lexer alias backing the scope
    template: str
    tab_name: str

    def to_dict(self) -> dict[str, str]:
        """Serialize with the wire key names used in ``output.json``."""
        return {
            "name": self.name,
            "extName": self.ext_name,
            "scopeName": self.scope_name,
            "grammar": self.grammar,
            "template": self.template,
            "tabName": self.tab_name,
        }


# --- Templates ---

CSS_TEMPLATE = """html {
  font-size: 16px;
  font-family: 'Open Sans', sans-serif;
}

body {
  margin: 0;
}

*,
*:before,
*:after {
  box-sizing: border-box;
}"""

HTML_TEMPLATE = """<html lang="en">

<head>
  <title>HTML Template</title>
</head>

<body>
  <main>
    <!-- Page contents -->
    <button id="btn" />
  </main>
</body>

</html>"""

JAVASCRIPT_TEMPLATE = """const btn = document.getElementById('btn');
let count = 0;

function render() {
  btn.innerText = `Count: ${count}`;
}

btn.addEventListener('click', () => {
  // Count from 1 to 10.
  if (count < 10) {
    count += 1;
    render();
  }
});
"""

PYTHON_TEMPLATE = '''import os

"""A string"""

# A comment

class Foo(object):
    def __init__(self):
        num = 42
        print(num)

    @property
    def foo(self):
        return 'bar'
'''

GO_TEMPLATE = """type config struct {
    port int
}

func main() {
    var cfg config

    flag.IntVar(&cfg.port, "port", 4000)
    flag.Parse()

    // Start the web server.
    addr := fmt.Printf(":%d", cfg.port)
    log.Fatal(http.ListenAndServe(addr, nil))
}
"""

JAVA_TEMPLATE = """public class Main {
  int num = 1;
  boolean bool = true;
  String foo = "bar";

  static void printMessage() {
      System.out.println("Hello World!");
  }

  public static void main(String[] args) {
      // Print message to stdout.
      printMessage();
  }
}
"""

CPP_TEMPLATE = """#include <iostream>
#include <fstream>

int main() {
  string line;
  ifstream file;

  file.open("myfile.txt");

  // Read file line by line.
  while(getline(myfile, line)) {
     printf("%s", line.c_str());
  }
}
"""

PHP_TEMPLATE = """<?php

class Artist extends Model {
  /**
   * @var string
   */
  protected $table = "artists";

  public function new(string $name): self {
    return self::create([
      "name" => $name,
    ]);
  }
}
"""

RUBY_TEMPLATE = """require 'json'

# A comment
class Counter
  attr_reader :count

  def initialize(start = 0)
    @count = start
  end

  def increment!
    @count += 1
    puts "Count: #{@count}"
  end
end
"""

RUST_TEMPLATE = """use std::collections::HashMap;

// A comment
#[derive(Debug)]
struct Config {
    port: u16,
}

fn main() {
    let cfg = Config { port: 4000 };
    let mut counts: HashMap<&str, i32> = HashMap::new();
    counts.insert("requests", 1);
    println!("Listening on {}", cfg.port);
}
"""

ELIXIR_TEMPLATE = """defmodule Counter do
  @moduledoc "A simple counter."

  # A comment
  def start(initial \\\\ 0) do
    Agent.start_link(fn -> initial end, name: __MODULE__)
  end

  def increment do
    Agent.update(__MODULE__, &(&1 + 1))
    IO.puts("Count: #{value()}")
  end
end
"""


# --- Registry ---

LANGUAGES: tuple[Language, ...] = (
    Language(
        name="JavaScript",
        ext_name="js",
        scope_name="source.js",
        grammar="javascript",
        template=JAVASCRIPT_TEMPLATE,
        tab_name="main.js",
    ),
    Language(
        name="CSS",
        ext_name="css",
        scope_name="source.css",
        grammar="css",
        template=CSS_TEMPLATE,
        tab_name="styles.css",
    ),
    Language(
        name="HTML",
        ext_name="html",
        scope_name="text.html.basic",
        grammar="html",
        template=HTML_TEMPLATE,
        tab_name="index.html",
    ),
    Language(
        name="Python",
        ext_name="py",
        scope_name="source.python",
        grammar="python",
        template=PYTHON_TEMPLATE,
        tab_name="main.py",
    ),
    Language(
        name="Go",
        ext_name="go",
        scope_name="source.go",
        grammar="go",
        template=GO_TEMPLATE,
        tab_name="main.go",
    ),
    Language(
        name="Java",
        ext_name="java",
        scope_name="source.java",
        grammar="java",
        template=JAVA_TEMPLATE,
        tab_name="Main.java",
    ),
    Language(
        name="C++",
        ext_name="cpp",
        scope_name="source.cpp",
        grammar="cpp",
        template=CPP_TEMPLATE,
        tab_name="main.cpp",
    ),
    Language(
        name="PHP",
        ext_name="php",
        scope_name="source.php",
        grammar="php",
        template=PHP_TEMPLATE,
        tab_name="main.php",
    ),
    Language(
        name="Ruby",
        ext_name="rb",
        scope_name="source.ruby",
        grammar="ruby",
        template=RUBY_TEMPLATE,
        tab_name="main.rb",
    ),
    Language(
        name="Rust",
        ext_name="rs",
        scope_name="source.rust",
        grammar="rust",
        template=RUST_TEMPLATE,
        tab_name="main.rs",
    ),
    Language(
        name="Elixir",
        ext_name="ex",
        scope_name="source.elixir",
        grammar="elixir",
        template=ELIXIR_TEMPLATE,
        tab_name="main.ex",
    ),
)


def get_language(ext_name: str) -> Optional[Language]:
    """Look up a registered language by its file-extension tag."""
    for language in LANGUAGES:
        if language.ext_name == ext_name:
            return language
    return None


def select_languages(ext_names: Optional[list[str]] = None) -> tuple[Language, ...]:
    """Return the registered languages, optionally filtered to ``ext_names``.

    The result always follows registry order, whatever order ``ext_names``
    is given in.

    Raises:
        ValueError: If an ext name is not registered.
    """
    if ext_names is None:
        return LANGUAGES
    unknown = [name for name in ext_names if get_language(name) is None]
    if unknown:
        valid = ", ".join(language.ext_name for language in LANGUAGES)
        raise ValueError(f"Unknown language(s) {', '.join(unknown)}. Valid languages: {valid}")
    wanted = set(ext_names)
    return tuple(language for language in LANGUAGES if language.ext_name in wanted)
