# tests/conftest.py
import textwrap

import pytest


UP_COUNTER = """\
//-----------------------------------------------------
// Design Name : up_counter
// File Name   : up_counter.v
// Function    : Up counter
//-----------------------------------------------------
module up_counter    (
out     ,  // Output of the counter
enable  ,  // enable for counter
clk     ,  // clock Input
reset      // reset Input
);
//----------Output Ports--------------
     output [7:0] out;
//------------Input Ports--------------
  input enable, clk, reset;
//------------Internal Variables--------
 reg [7:0] out;
//-------------Code Starts Here-------
 always @(posedge clk)
 if (reset) begin
   out <= 8'b0 ;
 end else if (enable) begin
   out <= out + 1;
 end
endmodule
"""


@pytest.fixture
def up_counter_src() -> str:
    return UP_COUNTER


@pytest.fixture
def shift_register_src() -> str:
    # Uses every construct the printer can render, plus a Block
    return textwrap.dedent("""\
        module shifter(input clk, input [3:0] din, output [3:0] q);
            reg [3:0] stage;
            reg [3:0] q;
            always @(negedge clk) begin
                stage = din + 1;
                if (stage) begin
                    q <= stage;
                    stage <= 0;
                end else
                    q <= q + stage + 2;
            end
        endmodule
    """)
